"""
Crystal CLI.

Usage:
    crystal paths <root>
    crystal config <root> [--env NAME] [--json]
    crystal check <root> [--env NAME]
"""

__cli_name__ = "crystal"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
