"""FMS SecPolicy - Main entry point.

Render AWS Firewall Manager WAFv2 policies from resource tags.
"""
from fms_secpolicy.adapters.inbound.cli_adapter import main as cli_main


def main() -> None:
    """Main entry point - delegates to CLI adapter."""
    cli_main()


if __name__ == "__main__":
    main()
