"""``python -m snmpvlan`` / ``snmpvlan`` console script."""

from __future__ import annotations

import os

from tabulate import tabulate

from snmpvlan import __version__, configure_logging, glogger


def _print_startup_banner() -> None:
    startup_rows = [["version", __version__]]

    for var in ("GITHUB_REF", "GITHUB_SHA", "BUILDTIME"):
        val = os.environ.get(var)
        if val and not val.endswith("_is_undefined"):
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "snmpvlan starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point."""
    configure_logging()
    _print_startup_banner()

    from snmpvlan.cli import main as cli_main

    cli_main()


if __name__ == "__main__":
    main()
