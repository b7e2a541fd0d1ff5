from __future__ import annotations
import sys, platform, datetime

from struct_tetris import __version__ as app_ver, __dev__ as is_dev

def _ensure_utf8_stdout() -> None:
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8")

def _get_versions() -> dict[str, str]:
    import lark
    import llvmlite
    from llvmlite import binding as llvm

    llvm_lib_ver = ".".join(map(str, (getattr(llvm, "llvm_version_info", None) or ()))) or "unknown"
    return {
        "app": app_ver,
        "python": platform.python_version(),
        "lark": getattr(lark, "__version__", "unknown"),
        "llvmlite": getattr(llvmlite, "__version__", "unknown"),
        "llvm": llvm_lib_ver,
    }

def print_banner() -> None:
    _ensure_utf8_stdout()
    v = _get_versions()
    today = datetime.date.today().isoformat()

    # Only use ANSI styling if stdout is a TTY
    if sys.stdout.isatty():
        BOLD, DIM, RESET = "\x1b[1m", "\x1b[2m", "\x1b[0m"
    else:
        BOLD, DIM, RESET = "", "", ""

    dev_marker = " (dev)" if is_dev else ""
    print(
        f"{BOLD}Struct Tetris{RESET} • {v['app']}{dev_marker}\n"
        f"{DIM}Python {v['python']} • lark {v['lark']} • llvmlite {v['llvmlite']} • LLVM {v['llvm']} • {today}{RESET}\n"
    )
