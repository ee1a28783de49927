import logging
import os
import struct

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from .constants import PT_LOAD


logger = logging.getLogger(__name__)


class Segment(object):
    ''' Program header entry of the core file, copied from the pyelftools view of the entry
        so that it can be modified and written back in place.
    '''
    def __init__(self, index, entry_offset, p_type, p_offset, p_vaddr, p_paddr, p_filesz, p_memsz, p_flags, p_align):
        self.index = index
        self.entry_offset = entry_offset  # file offset of this program header entry
        self.p_type = p_type
        self.p_offset = p_offset
        self.p_vaddr = p_vaddr
        self.p_paddr = p_paddr
        self.p_filesz = p_filesz
        self.p_memsz = p_memsz
        self.p_flags = p_flags
        self.p_align = p_align

    def __str__(self):
        return "Type: 0x%x, Offset: 0x%08x, Vaddr: 0x%08x, Paddr: 0x%08x, Filesize: 0x%08x, Memsize: 0x%08x, Flags: 0x%08x, Align: %d" % \
                (self.p_type, self.p_offset, self.p_vaddr, self.p_paddr,
                 self.p_filesz, self.p_memsz, self.p_flags, self.p_align)

    def contains(self, addr, size):
        return self.p_vaddr <= addr and addr + size <= self.p_vaddr + self.p_memsz

    def dump_entry(self, elfclass, little_endian):
        # 64-bit cores change the location of p_flags
        endian = '<' if little_endian else '>'
        if elfclass == 64:
            return struct.pack(endian + "2I6Q",
                               self.p_type, self.p_flags, self.p_offset, self.p_vaddr, self.p_paddr,
                               self.p_filesz, self.p_memsz, self.p_align)
        else:
            return struct.pack(endian + "8I",
                               self.p_type, self.p_offset, self.p_vaddr, self.p_paddr,
                               self.p_filesz, self.p_memsz, self.p_flags, self.p_align)


class CorePhdrs(object):
    def __init__(self, core_file):
        '''
        @param core_file: core file opened for reading and writing in binary mode
        @raise ELFError: if core_file is not an ELF file
        '''
        self._file = core_file
        self.elf = ELFFile(core_file)
        self.elfclass = self.elf.elfclass
        self.little_endian = self.elf.little_endian
        self.loads = self._init_loads()

    def _init_loads(self):
        ''' Copy the PT_LOAD program headers of the core file
        '''
        loads = []
        phoff = self.elf.header['e_phoff']
        phentsize = self.elf.header['e_phentsize']
        for idx, s in enumerate(self.elf.iter_segments()):
            if s['p_type'] != 'PT_LOAD':
                continue
            loads.append(Segment(idx, phoff + idx * phentsize, PT_LOAD, s['p_offset'], s['p_vaddr'], s['p_paddr'],
                                 s['p_filesz'], s['p_memsz'], s['p_flags'], s['p_align']))
        logger.debug("Copied %d PT_LOAD program headers", len(loads))
        return loads

    def addr_to_segment(self, addr, size):
        ''' Returns the PT_LOAD segment that contains [addr, addr + size) or None
        '''
        for segment in self.loads:
            if segment.contains(addr, size):
                return segment
        return None

    def write_entry(self, segment):
        self._file.seek(segment.entry_offset, os.SEEK_SET)
        self._file.write(segment.dump_entry(self.elfclass, self.little_endian))

    def add_region(self, addr, size, core_size):
        ''' Make the file backed part of the segment holding addr reach the end of the region.
            @return: the (possibly grown) core size
        '''
        segment = self.addr_to_segment(addr, size)
        if segment is None:
            logger.warning("no PT_LOAD segment contains 0x%x-0x%x", addr, addr + size)
            return core_size

        filesz = addr + size - segment.p_vaddr
        if segment.p_filesz < filesz:
            logger.debug("extending segment %d file size 0x%x -> 0x%x", segment.index, segment.p_filesz, filesz)
            segment.p_filesz = filesz
            self.write_entry(segment)

        end = segment.p_offset + segment.p_filesz
        if end > core_size:
            logger.debug("growing core 0x%x -> 0x%x", core_size, end)
            self._file.truncate(end)
            core_size = end
        return core_size


def update_phdrs(core_file, regions, core_size):
    ''' Adjust the program headers of the core file so the injected regions are part of
        the file backed segments.
        @param core_file: core file opened for reading and writing in binary mode
        @param regions: (memory address, size) pairs that were injected
        @param core_size: current size of the core file
        @return: the final core size
    '''
    regions = list(regions)
    core_file.flush()
    try:
        phdrs = CorePhdrs(core_file)
    except ELFError as e:
        logger.warning("not updating program headers: %s", e)
        return core_size

    for addr, size in regions:
        if size == 0:
            continue
        core_size = phdrs.add_region(addr, size, core_size)

    core_file.flush()
    logger.info("updated program headers for %d regions, core size 0x%x", len(regions), core_size)
    return core_size
