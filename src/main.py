"""
Main Entry Point

Command line entry point for the cert-manager force renewal tool.
"""

import argparse
import sys

from app import CertRenewalApp
from utils import Config, setup_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find cert-manager certificates and force their renewal.",
    )
    parser.add_argument(
        '--issuerName', '--issuer-name', dest='issuer_name', default=None,
        help="Filter affected certificates by issuer name",
    )
    parser.add_argument(
        '--renew', action='store_true', default=False,
        help="If set, any affected certificates will be renewed. This may take a few minutes per Certificate.",
    )
    parser.add_argument('--kubeconfig', default=None, help="Path to a kubeconfig file")
    parser.add_argument('--context', default=None, help="kubeconfig context to use")
    parser.add_argument('--verbose', '-v', action='store_true', help="Enable debug logging")
    parser.add_argument('--log-file', dest='log_file', default=None, help="Also write logs to this file")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point."""
    try:
        config = Config(parse_args(argv))
        setup_logging(verbose=config.verbose, log_file=config.log_file)

        app = CertRenewalApp(config)
        exit_code = app.run()
        sys.exit(exit_code)

    except KeyboardInterrupt:
        print("Interrupted, no further changes made")
        sys.exit(130)
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
