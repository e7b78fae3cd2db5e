"""
Modulary CLI - inspect module manifests from the command line.

Usage:
    modulary plan <manifest>
    modulary render <manifest> --section head
    modulary check <manifest>
    modulary graph <manifest> --dot
"""

__version__ = "0.1.0"
__cli_name__ = "modulary"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
