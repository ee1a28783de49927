import itertools
import logging
import os
import sys

from . import logger as package_logger
from .coreinject import CoreInjector, RegionLedger
from .errors import CoreInjectError, UsageError
from .options import OverrideRegistry
from .phdrs import update_phdrs
from .symmap import SymbolMap


logger = logging.getLogger(__name__)

USAGE = '''usage: %(prog)s <options> <core> <symbol.map> [binary-dump]...

Available options:
  --data=<ident>:<bytecount>@<source-file>+<source-offset>
        Inject <bytecount> bytes of data at offset <source-offset>
        of file <source-file> to the core. The data is injected to
        the position of the <ident> stored in the symbol map.
  -v, --verbose
        Print debug messages.
  -h, --help
        Show this help and exit.
'''


def usage(prog, f=None):
    if f is None:
        f = sys.stderr
    f.write(USAGE % {'prog': prog})


def parse_args(argv):
    ''' Split the arguments into options and positional arguments.
        Options must come first. The first argument not starting with '-' ends the options.
        @return: (overrides, verbose, core, symbol_map, dumps)
        @raise UsageError: if the core file or the symbol map are missing
        @raise DataOptionError: for an unknown option or a malformed --data= option
    '''
    if len(argv) < 3:
        raise UsageError("too few arguments")

    overrides = OverrideRegistry()
    verbose = False

    i = 0
    while i < len(argv) and argv[i].startswith('-'):
        if argv[i] in ('-v', '--verbose'):
            verbose = True
        else:
            overrides.add(argv[i])
        i += 1

    positional = argv[i:]
    if len(positional) < 2:
        raise UsageError("a core file and a symbol map are required")

    return overrides, verbose, positional[0], positional[1], positional[2:]


def run(core_filename, map_filename, dumps, overrides=None):
    ''' Inject all binary dumps and leftover --data options into the core file.
        @return: 0 if everything was injected, 1 otherwise
    '''
    if overrides is None:
        overrides = OverrideRegistry()

    if not os.path.exists(core_filename):
        logger.error("failed to stat %s (no such file)", core_filename)
        return 1

    try:
        f_core = open(core_filename, "r+b", buffering=0)
    except (IOError, OSError) as e:
        logger.error("failed to open %s for writing (%s)", core_filename, e.strerror or e)
        return 1

    with f_core:
        try:
            f_symmap = open(map_filename, "r", errors="replace")
        except (IOError, OSError) as e:
            logger.error("failed to open %s (%s)", map_filename, e.strerror or e)
            return 1

        with f_symmap:
            ledger = RegionLedger()
            injector = CoreInjector(f_core, SymbolMap(f_symmap), overrides, ledger)

            ok = True
            # try to add binary dumps (continuing on error)
            for dump in dumps:
                ok &= injector.inject(dump)

            # try to add leftover specified direct data
            ok &= injector.inject_leftovers()

        if not ok:
            return 1

        core_size = os.fstat(f_core.fileno()).st_size
        update_phdrs(f_core, ledger.drain(), core_size)

    return 0


def main(argv=None):
    if argv is None:
        argv = sys.argv
    prog = os.path.basename(argv[0]) if argv else 'coreinject'
    args = argv[1:]

    options = list(itertools.takewhile(lambda a: a.startswith('-'), args))
    if '-h' in options or '--help' in options:
        usage(prog, sys.stdout)
        return 0

    try:
        overrides, verbose, core, symmap, dumps = parse_args(args)
    except UsageError:
        usage(prog)
        return 1
    except CoreInjectError as e:
        logger.error("%s", e)
        return 1

    if verbose:
        package_logger.setLevel(logging.DEBUG)

    return run(core, symmap, dumps, overrides)


if __name__ == "__main__":
    sys.exit(main())
