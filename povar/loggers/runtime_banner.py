from __future__ import annotations

def runtime_banner():
    """Lightweight runtime environment capture for reproducibility logs."""
    import sys
    import platform
    import numpy as np
    import scipy

    return {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "numpy": np.__version__,
        "scipy": scipy.__version__,
        "lp_backend": "scipy.optimize.linprog/highs",
        "dtype_default": str(np.dtype(float)),
    }
