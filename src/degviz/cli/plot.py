"""
Plot CLI subcommands.

Draws one plot from a Cuffdiff or edgeR table on disk and writes it to a file.

Usage:
    degviz volcano --input gene_exp.diff --type cuffdiff -x hESC -y iPS --output volcano.png
    degviz ma --input toptags.csv --type edger -x WT -y KO --output ma.pdf
    degviz scatter --config scatter.yaml
    degviz box --input gene_exp.diff --type cuffdiff -x hESC -y iPS --output box.svg
"""

import argparse
import logging
from pathlib import Path

from degviz.cli._validators import _cutoff_probability, _non_negative_float, _positive_int

logger = logging.getLogger(__name__)

PLOTS = {
    "volcano": "Volcano plot (log2 fold-change vs. -log10 adjusted p-value)",
    "ma": "MA plot (log10 mean expression vs. log2 fold-change)",
    "scatter": "Scatterplot of log10 mean expression, y vs. x",
    "box": "Box plot of log10 mean expression per condition",
}

# Subcommands with labelled features / fold-change axis limits
LABELLED_PLOTS = ("volcano", "ma", "scatter")
LIMITED_PLOTS = ("volcano", "ma")

REQUIRED = ("input", "type", "x", "y", "output")


def register_parser(subparsers):
    """Register one subcommand per plot type."""
    for kind, help_text in PLOTS.items():
        parser = subparsers.add_parser(
            kind,
            help=help_text,
            description=help_text,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        _add_arguments(parser, kind)
        parser.set_defaults(func=run_plot, kind=kind)


def _add_arguments(parser, kind):
    # Not argparse-required: a --config file may supply them
    parser.add_argument(
        "--input", "-i", type=Path,
        help="Cuffdiff *.diff file or edgeR topTags table (CSV/TSV)"
    )
    parser.add_argument(
        "--type", "-t",
        help="Tool that produced the input: cuffdiff or edger"
    )
    parser.add_argument("-x", help="Reference condition (fold-change denominator)")
    parser.add_argument("-y", help="Compared condition (fold-change numerator)")
    parser.add_argument(
        "--output", "-o", type=Path,
        help="Output figure (.png, .pdf, .svg or .html)"
    )
    parser.add_argument(
        "--comparison", nargs=2, metavar=("X", "Y"),
        help="Pair an edgeR table was computed for, as in exactTest(pair = c(X, Y))"
    )

    parser.add_argument(
        "--alpha", type=_cutoff_probability, default=0.05,
        help="Adjusted p-value cutoff (default: 0.05)"
    )
    parser.add_argument(
        "--lfc", type=_non_negative_float, default=None,
        help="log2 fold-change cutoff (default: 1)"
    )
    if kind in LABELLED_PLOTS:
        parser.add_argument(
            "--highlight", nargs="+", metavar="ID",
            help="Feature ids to label on the plot"
        )
    if kind in LIMITED_PLOTS:
        parser.add_argument(
            "--lim", type=float, nargs=2, metavar=("LOW", "HIGH"),
            help="Fold-change axis limits (default: +/- 99th percentile of |log2 fold-change|)"
        )

    parser.add_argument("--no-title", dest="title", action="store_false", help="Hide the title")
    parser.add_argument("--no-legend", dest="legend", action="store_false", help="Hide the legend")
    parser.add_argument("--no-grid", dest="grid", action="store_false", help="Hide grid lines")
    parser.add_argument(
        "--data-out", type=Path,
        help="Also write the classified table to this CSV file"
    )
    parser.add_argument(
        "--style", choices=["paper", "presentation", "notebook"], default="paper",
        help="Visual style (default: paper)"
    )
    parser.add_argument(
        "--palette", choices=["default", "colorblind", "print"], default="default",
        help="Color palette (default: default)"
    )
    parser.add_argument(
        "--dpi", type=_positive_int, default=300,
        help="DPI for raster formats (default: 300)"
    )
    parser.add_argument(
        "--config", type=Path,
        help="YAML or JSON file with option values; explicit options override it"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Debug logging"
    )


def load_input(args):
    """Read the input table for the tool named by args.type."""
    from degviz.core.errors import InvalidArgument
    from degviz.core.types import ToolType
    from degviz.io.loaders import read_cuffdiff, read_edger_table

    tool = ToolType.parse(args.type)
    if tool is ToolType.DESEQ:
        raise InvalidArgument(
            "deseq input needs a fitted pydeseq2 DeseqDataSet and cannot be read from a file; "
            "call degviz.vs_volcano(..., type='deseq', d_factor=...) from Python instead"
        )
    if tool is ToolType.CUFFDIFF:
        return tool, read_cuffdiff(args.input)
    return tool, read_edger_table(args.input, comparison=args.comparison)


def _plot_kwargs(args) -> dict:
    kwargs = {
        "title": args.title,
        "legend": args.legend,
        "grid": args.grid,
        "return_data": True,
        "palette": args.palette,
        "style": args.style,
        "significance_cutoff": float(args.alpha),
        "fold_change_cutoff": None if args.lfc is None else float(args.lfc),
    }
    if args.kind in LABELLED_PLOTS:
        kwargs["highlight"] = args.highlight
    if args.kind == "volcano":
        kwargs["x_lim"] = args.lim
    elif args.kind == "ma":
        kwargs["y_lim"] = args.lim
    return kwargs


# dest -> argparse type applied to values that came from a --config file
VALIDATED = {
    "alpha": _cutoff_probability,
    "lfc": _non_negative_float,
    "dpi": _positive_int,
}


def validate_merged(args):
    """
    Run config-supplied values through the same checks as the command line.

    Raises:
        InvalidArgument: If a value is out of range or not a number
    """
    from degviz.core.errors import InvalidArgument

    for dest, check in VALIDATED.items():
        value = getattr(args, dest, None)
        if value is None:
            continue
        if isinstance(value, bool):
            raise InvalidArgument(f"{dest} must be a number, got {value!r}")
        try:
            setattr(args, dest, check(str(value)))
        except (argparse.ArgumentTypeError, ValueError) as e:
            raise InvalidArgument(f"{dest}: {e}") from e
    return args


def run_plot(args):
    """Draw one plot and write it (and optionally the table) to disk."""
    from degviz.api import vs_volcano, vs_ma_plot, vs_scatter_plot, vs_box_plot
    from degviz.cli.config import load_config, merge_config_with_args
    from degviz.core.errors import InvalidArgument

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    plot_functions = {
        "volcano": vs_volcano,
        "ma": vs_ma_plot,
        "scatter": vs_scatter_plot,
        "box": vs_box_plot,
    }

    try:
        if args.config is not None:
            config = load_config(args.config)
            args = merge_config_with_args(config, args, getattr(args, "cli_args", None))
            validate_merged(args)
            logger.info(f"Loaded config from {args.config}")

        missing = [name for name in REQUIRED if getattr(args, name) is None]
        if missing:
            options = ", ".join(f"--{name}" if len(name) > 1 else f"-{name}" for name in missing)
            logger.error(f"Missing required options: {options}")
            return 2

        tool, data = load_input(args)
        table, figure = plot_functions[args.kind](
            str(args.x), str(args.y), data, type=tool, **_plot_kwargs(args)
        )
    except InvalidArgument as e:
        logger.error(f"Invalid argument: {e}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 1

    try:
        path = figure.save(args.output, dpi=args.dpi)
        logger.info(f"Saved {args.kind} plot of {figure.n_points} features to {path}")
        if args.data_out is not None:
            args.data_out.parent.mkdir(parents=True, exist_ok=True)
            table.to_csv(args.data_out, index=False)
            logger.info(f"Saved classified table to {args.data_out}")
    except OSError as e:
        logger.error(f"Could not write output: {e}")
        return 1
    finally:
        figure.close()

    return 0
