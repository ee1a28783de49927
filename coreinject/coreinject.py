import logging
import os

from .errors import (InjectError,
                     SourceOpenError,
                     SeekError,
                     AllocationError,
                     ShortReadError,
                     ShortWriteError,
                    )
from .options import OverrideRegistry


logger = logging.getLogger(__name__)


class RegionLedger(object):
    ''' Memory regions that were filled in the core file.
        Handed to the program header update once all data is injected.
    '''
    def __init__(self):
        self.regions = []

    def __len__(self):
        return len(self.regions)

    def __iter__(self):
        return iter(self.regions)

    def record(self, mem_offset, size):
        self.regions.append((mem_offset, size))

    def drain(self):
        regions = self.regions
        self.regions = []
        return regions


def ident_from_path(path):
    ''' The ident of a binary dump is its file name without directories.
    '''
    return os.path.basename(path)


class CoreInjector(object):
    def __init__(self, core_file, symbol_map, overrides=None, ledger=None):
        '''
        @param core_file: core file opened for reading and writing in binary mode
        @param symbol_map: SymbolMap used to locate the data of each ident
        @param overrides: OverrideRegistry with the user specified direct data
        @param ledger: RegionLedger collecting the injected regions
        '''
        self.core_file = core_file
        self.symbol_map = symbol_map
        self.overrides = overrides if overrides is not None else OverrideRegistry()
        self.ledger = ledger if ledger is not None else RegionLedger()

    def inject(self, path):
        ''' Inject the direct and indirect data of the ident named by path.
            A failing injection is reported and the other one is still attempted.
            @param path: binary dump file or bare ident (for leftover --data options)
            @return: True if nothing failed
        '''
        ident = ident_from_path(path)
        direct, indirect = self.symbol_map.lookup(ident)

        if direct.size == 0 and indirect.size == 0:
            logger.info("no data for ident %s in symbol map", ident)
            return True

        ok = True

        if direct.size > 0:
            direct.filename = path
            # replace/insert any user specified direct data
            self.overrides.apply(direct)
            ok &= self._try_write(direct, True)

        if indirect.size > 0:
            indirect.filename = path
            ok &= self._try_write(indirect, False)

        return ok

    def inject_leftovers(self):
        ''' Inject the --data options that did not belong to any binary dump.
            @return: True if nothing failed
        '''
        ok = True
        for o in self.overrides.unprocessed():
            ok &= self.inject(o.ident)
        return ok

    def _try_write(self, record, direct):
        # size 0 means the data was overridden away
        if record.size == 0:
            return True
        try:
            self.write_core(record, direct)
        except InjectError as e:
            logger.error("%s", e)
            return False
        return True

    def write_core(self, record, direct):
        ''' Copy record.size bytes at record.dump_offset of record.filename
            to record.core_offset of the core file.
            @raise InjectError: if the data could not be copied
        '''
        try:
            f_dump = open(record.filename, "rb")
        except (IOError, OSError) as e:
            raise SourceOpenError("failed to open %s for ident %s (%s)" % (record.filename, record.ident, e.strerror or e),
                                  record.ident)

        with f_dump:
            self._seek(self.core_file, record.core_offset, record.ident, "core")
            self._seek(f_dump, record.dump_offset, record.ident, "dump")

            try:
                buf = bytearray(record.size)
            except (MemoryError, OverflowError):
                raise AllocationError("out of memory allocating %d bytes" % record.size, record.ident)

            try:
                nread = f_dump.readinto(buf)
                reason = "got %d" % (nread or 0)
            except (IOError, OSError) as e:
                nread = None
                reason = e.strerror or str(e)
            if nread != record.size:
                if direct:
                    logger.warning("specify the data source for %s with: --data=%s:%d@<filename>+<offset>",
                                   record.ident, record.ident, record.size)
                raise ShortReadError("failed to read %d bytes from dump %s for ident %s (%s)" %
                                     (record.size, record.filename, record.ident, reason), record.ident)

        try:
            nwritten = self.core_file.write(buf)
            self.core_file.flush()
        except (IOError, OSError) as e:
            raise ShortWriteError("failed to write %d bytes to core for ident %s (%s)" %
                                  (record.size, record.ident, e.strerror or e), record.ident)
        if nwritten != record.size:
            raise ShortWriteError("failed to write %d bytes to core for ident %s (wrote %d)" %
                                  (record.size, record.ident, nwritten or 0), record.ident)

        self.ledger.record(record.mem_offset, record.size)

        print("injected: %s, %d bytes, %s" % (record.ident, record.size, "direct" if direct else "indirect"))

    def _seek(self, f, offset, ident, what):
        try:
            f.seek(offset, os.SEEK_SET)
        except (IOError, OSError, ValueError, OverflowError) as e:
            raise SeekError("failed to seek to position 0x%x for ident %s in %s (%s)" %
                            (offset, ident, what, e), ident)
