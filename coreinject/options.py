import logging
import re

from .constants import DATA_OPTION
from .errors import DataOptionError


logger = logging.getLogger(__name__)

DATA_RE = re.compile(r'^--data=(?P<ident>[^:]+):(?P<size>[0-9]+)@(?P<filename>[^+]+)\+(?P<offset>[0-9]+)$')


class Override(object):
    ''' User specified direct data: size bytes at offset of filename are injected
        at the position of ident stored in the symbol map.
    '''
    def __init__(self, ident, size, filename, offset):
        self.ident = ident
        self.size = size
        self.filename = filename
        self.offset = offset
        self.processed = False

    def __str__(self):
        return "%s%s:%d@%s+%d" % (DATA_OPTION, self.ident, self.size, self.filename, self.offset)


def parse_data_option(arg):
    ''' Parse --data=<ident>:<bytecount>@<source-file>+<source-offset>
        @raise DataOptionError: if arg is not a --data= option or is malformed
    '''
    if not arg.startswith(DATA_OPTION):
        raise DataOptionError("unknown option", arg)

    m = DATA_RE.match(arg)
    if m is None:
        raise DataOptionError("invalid --data syntax", arg)

    return Override(m.group('ident'), int(m.group('size')), m.group('filename'), int(m.group('offset')))


class OverrideRegistry(object):
    def __init__(self, overrides=None):
        self.overrides = []
        for o in overrides or []:
            self.add(o)

    def __len__(self):
        return len(self.overrides)

    def __iter__(self):
        return iter(self.overrides)

    def add(self, override):
        if isinstance(override, str):
            override = parse_data_option(override)
        self.overrides.append(override)
        logger.debug("registered %s", override)
        return override

    def apply(self, record):
        ''' Replace the data source of record with the first unprocessed override for its ident.
            The override is marked processed so it is never applied again.
            @return: the applied Override or None
        '''
        for o in self.overrides:
            if o.processed or o.ident != record.ident:
                continue

            logger.info("using %s for %s", o, record.ident)
            record.size = o.size
            record.dump_offset = o.offset
            record.filename = o.filename
            o.processed = True
            return o
        return None

    def unprocessed(self):
        ''' Overrides that have not been applied yet.
            Overrides consumed while iterating are skipped.
        '''
        return (o for o in self.overrides if not o.processed)
