import logging

from .constants import DIRECT_KINDS, INDIRECT_KINDS


logger = logging.getLogger(__name__)


class SymbolRecord(object):
    ''' Location of one kind (direct or indirect) of data for an ident.
        A size of 0 means the ident has no data of this kind.
    '''
    def __init__(self, ident, core_offset=0, mem_offset=0, size=0, dump_offset=0, filename=None):
        self.ident = ident
        self.core_offset = core_offset  # where the data goes in the core file
        self.mem_offset = mem_offset    # memory address the data belongs to
        self.size = size
        self.dump_offset = dump_offset  # where the data starts in the source file
        self.filename = filename

    def __str__(self):
        return "Ident: %s, Core offset: 0x%x, Mem: 0x%x, Size: 0x%x, Dump offset: 0x%x, File: %s" % \
                (self.ident, self.core_offset, self.mem_offset, self.size,
                 self.dump_offset, self.filename)


def parse_line(line):
    ''' Split a symbol map line of the form
            <core-offset> <mem-address> <size> <kind> <ident>
        The numbers are hexadecimal. The ident is the rest of the line.
        @return: (core_offset, mem_offset, size, kind, ident) or None for an invalid line
    '''
    fields = line.rstrip('\r\n').split(' ', 4)
    if len(fields) != 5:
        return None

    try:
        core_offset, mem_offset, size = [int(f, 16) for f in fields[:3]]
    except ValueError:
        return None
    if core_offset < 0 or mem_offset < 0 or size < 0:
        return None

    kind = fields[3]
    if len(kind) != 1:
        return None

    return core_offset, mem_offset, size, kind, fields[4]


class SymbolMap(object):
    def __init__(self, fileobj):
        '''
        @param fileobj: symbol map opened in text mode. It is rewound for every lookup.
        '''
        self._file = fileobj

    def lookup(self, ident):
        ''' Search the full symbol map for the direct and indirect data of ident.
            @return: (direct, indirect) SymbolRecords, zero sized if not present
        '''
        direct = SymbolRecord(ident)
        indirect = SymbolRecord(ident)

        self._file.seek(0)
        for lineno, line in enumerate(self._file, 1):
            entry = parse_line(line)
            if entry is None:
                logger.debug("ignoring invalid line %d in symbol map", lineno)
                continue

            core_offset, mem_offset, size, kind, name = entry
            if name != ident:
                continue

            if kind in DIRECT_KINDS:
                record = direct
            elif kind in INDIRECT_KINDS:
                record = indirect
            else:
                logger.debug("ignoring unknown kind '%s' for %s on line %d", kind, ident, lineno)
                continue

            # last entry wins in case of duplicates
            record.core_offset = core_offset
            record.mem_offset = mem_offset
            record.size = size

        # indirect data comes first in the dump file, direct data follows it
        if indirect.size and direct.size:
            direct.dump_offset += indirect.size

        return direct, indirect
