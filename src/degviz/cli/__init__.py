"""
degviz CLI - Command-line plotting of differential expression results.

Commands:
    degviz volcano  - Volcano plot (log2 fold-change vs. -log10 adjusted p-value)
    degviz ma       - MA plot (log10 mean expression vs. log2 fold-change)
    degviz scatter  - Scatterplot of log10 mean expression, y vs. x
    degviz box      - Box plot of log10 mean expression per condition
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for degviz."""
    parser = argparse.ArgumentParser(
        prog="degviz",
        description="Plots for Cuffdiff and edgeR differential expression results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  volcano   Volcano plot (log2 fold-change vs. -log10 adjusted p-value)
  ma        MA plot (log10 mean expression vs. log2 fold-change)
  scatter   Scatterplot of log10 mean expression, y vs. x
  box       Box plot of log10 mean expression per condition

Examples:
  degviz volcano --input gene_exp.diff --type cuffdiff -x hESC -y iPS --output volcano.png
  degviz ma --input toptags.csv --type edger -x WT -y KO --output ma.pdf --lfc 2
  degviz volcano --config volcano.yaml --no-grid
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    from degviz.cli import plot
    plot.register_parser(subparsers)

    cli_args = sys.argv[1:] if args is None else list(args)
    parsed_args = parser.parse_args(cli_args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    parsed_args.cli_args = cli_args
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
