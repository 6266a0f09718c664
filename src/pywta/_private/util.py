import math
import subprocess

def check_graphviz_installed():
    try:
        subprocess.run(["dot", "-V"], check=True, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False

def is_nonnegative(weight) -> bool:
    """False for negative numbers and NaN."""
    return not math.isnan(weight) and weight >= 0
