"""Rewrite a VMF file in canonical form, optionally regenerating all IDs."""
from typing import List
from pathlib import Path
import argparse
import sys

from vmfkit import logger
from vmfkit.errors import SimpleError, VerboseError, VMFSyntaxError
from vmfkit.parser import parse


LOGGER = logger.get_logger(__name__, alias='renumber')


def main(args: List[str]) -> None:
    """Main script."""
    parser = argparse.ArgumentParser(description=__doc__)

    parser.add_argument(
        "inp",
        help="The VMF to read.",
    )
    parser.add_argument(
        "-o", "--out",
        help="Specify the destination filename. If not set, the input file is overwritten.",
        default="",
    )
    parser.add_argument(
        "--new-ids",
        help="Regenerate the IDs of worlds, solids, sides and entities.",
        action="store_true",
    )
    parser.add_argument(
        "--strict",
        help="Reject blocks which are not closed before the end of the file.",
        action="store_true",
    )
    parser.add_argument(
        "--max-depth",
        help="Reject files with blocks nested deeper than this.",
        type=int,
        default=None,
    )
    parser.add_argument(
        "--brief",
        help="Only report the innermost reason for a syntax error.",
        action="store_true",
    )

    result = parser.parse_args(args)
    logger.init_logging()
    source = Path(result.inp)
    dest = Path(result.out) if result.out else source

    with logger.context(source.name):
        LOGGER.info('Reading {}...', source)
        with source.open(encoding='utf8') as f:
            text = f.read()
        try:
            doc = parse(
                text,
                error=SimpleError if result.brief else VerboseError,
                filename=source,
                strict=result.strict,
                max_depth=result.max_depth,
            )
        except VMFSyntaxError as exc:
            LOGGER.error('{}', exc)
            raise SystemExit(1) from exc

        LOGGER.info('Writing {} blocks to {}...', len(doc), dest)
        with dest.open('w', encoding='utf8') as f:
            doc.serialise(f, new_ids=result.new_ids)


if __name__ == '__main__':
    main(sys.argv[1:])
