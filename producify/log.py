"""
Console output helpers shared by the build pipeline and the dev server.
"""

import sys
import time


class Colors:
    """ANSI color codes for terminal output"""
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


def log(msg, color=None, stream=None):
    """Print a timestamped log message"""
    stream = stream or sys.stdout
    timestamp = time.strftime("%H:%M:%S")
    if color:
        print(f"{Colors.GRAY}[{timestamp}]{Colors.RESET} {color}{msg}{Colors.RESET}", file=stream)
    else:
        print(f"{Colors.GRAY}[{timestamp}]{Colors.RESET} {msg}", file=stream)


def error(msg):
    log(f"E: {msg}", Colors.RED, stream=sys.stderr)
