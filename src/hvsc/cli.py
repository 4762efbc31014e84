import logging
import sys
from typing import Callable

import click

from .archive.bugs import BugListReader
from .archive.stil import StilReader
from .config import ROOT_ENVVAR, HvscPaths
from .dump import StilFormatter, render_bugs, render_lengths, render_psid
from .exceptions import HvscError
from .psid import read_psid
from .sldb import SongLengths


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)-8s | %(name)-20s | %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _check_sldb(paths: HvscPaths, sid_file: str, options: dict) -> None:
    click.echo(f"Retrieving song lengths of '{sid_file}'")
    lengths = SongLengths(paths).lookup(sid_file)
    if lengths is None:
        click.echo("Songlengths: no entry found")
        return
    click.echo(render_lengths(lengths), nl=False)


def _check_stil(paths: HvscPaths, sid_file: str, options: dict) -> None:
    reader = StilReader(paths, keep_preamble_fields=options["keep_preamble_fields"])
    key = paths.strip_root(sid_file)
    lines = reader.entry_lines(key)
    if lines is None:
        click.echo(f"STIL: no entry for {key}")
        return
    if options["raw"]:
        click.echo("STIL entry text:")
        for line in lines:
            click.echo(line)
        click.echo()
    document = reader.parse(key, lines)

    formatter = StilFormatter()
    tune = options["tune"]
    if tune is None:
        click.echo(formatter.render(document), nl=False)
        return
    fields = document.get_tune(tune)
    if fields is None:
        click.echo(f"STIL: no info for tune #{tune}")
        return
    click.echo(formatter.render_tune(tune, fields), nl=False)


def _check_bugs(paths: HvscPaths, sid_file: str, options: dict) -> None:
    entries = BugListReader(paths).lookup(sid_file)
    if entries is None:
        click.echo("BUGlist: no entry found, no worries")
        return
    click.echo(render_bugs(entries), nl=False)


def _check_psid(paths: HvscPaths, sid_file: str, options: dict) -> None:
    psid = read_psid(sid_file)
    click.echo(render_psid(psid), nl=False)
    if options["write_bin"]:
        psid.write_binary(options["write_bin"])
        click.echo(f"Written binary to {options['write_bin']}")


_CHECKS: dict[str, Callable[[HvscPaths, str, dict], None]] = {
    "sldb": _check_sldb,
    "stil": _check_stil,
    "bugs": _check_bugs,
    "psid": _check_psid,
}


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@click.command()
@click.argument("check", type=click.Choice([*_CHECKS, "all"]))
@click.argument("sid_file", type=click.Path(dir_okay=False))
@click.option("--root", required=True, envvar=ROOT_ENVVAR, metavar="PATH",
              type=click.Path(file_okay=False),
              help=f"HVSC root directory (default: ${ROOT_ENVVAR}).")
@click.option("-t", "--tune", type=click.IntRange(min=1), default=None,
              help="Only show the STIL info of subtune N.")
@click.option("--keep-preamble-fields", is_flag=True, default=False,
              help="Keep STIL fields that appear before the first tune marker.")
@click.option("--raw", is_flag=True, default=False,
              help="Print the STIL entry text before the parsed dump.")
@click.option("--write-bin", default=None, metavar="PATH",
              help="Write the C64 program of the SID file to PATH (psid check).")
@click.option("-v", "--verbose", is_flag=True, default=False,
              help="Log debug messages to stderr.")
def main(check: str, sid_file: str, root: str, tune: int | None,
         keep_preamble_fields: bool, raw: bool, write_bin: str | None,
         verbose: bool) -> None:
    """Show HVSC information about a SID file.

    \b
    Checks:
      sldb  song lengths from Songlengths.md5
      stil  SID Tune Information List entry
      bugs  BUGlist.txt entry
      psid  PSID/RSID header
      all   all of the above
    """
    _configure_logging(verbose)
    paths = HvscPaths.from_root(root)
    options = {
        "tune": tune,
        "keep_preamble_fields": keep_preamble_fields,
        "raw": raw,
        "write_bin": write_bin,
    }

    names = list(_CHECKS) if check == "all" else [check]
    failed = False
    for name in names:
        try:
            _CHECKS[name](paths, sid_file, options)
        except HvscError as exc:
            click.echo(f"Error: {exc}", err=True)
            failed = True
    if failed:
        sys.exit(1)
