import struct

import pytest


def build_elf_core(loads, data_size, elfclass=64, little_endian=True):
    ''' Build a minimal ELF core file
        @param loads: (p_offset, p_vaddr, p_filesz, p_memsz) for each PT_LOAD entry
        @param data_size: number of zero bytes following the program headers
    '''
    endian = '<' if little_endian else '>'
    ident = b'\x7fELF' + struct.pack('BBBB', 2 if elfclass == 64 else 1, 1 if little_endian else 2, 1, 0) + b'\x00' * 8
    phnum = len(loads)
    if elfclass == 64:
        ehdr = ident + struct.pack(endian + 'HHIQQQIHHHHHH', 4, 62, 1, 0, 64, 0, 0, 64, 56, phnum, 64, 0, 0)
        phdrs = b''.join(struct.pack(endian + '2I6Q', 1, 6, off, vaddr, vaddr, filesz, memsz, 0x1000)
                         for off, vaddr, filesz, memsz in loads)
    else:
        ehdr = ident + struct.pack(endian + 'HHIIIIIHHHHHH', 4, 20, 1, 0, 52, 0, 0, 52, 32, phnum, 40, 0, 0)
        phdrs = b''.join(struct.pack(endian + '8I', 1, off, vaddr, vaddr, filesz, memsz, 6, 0x1000)
                         for off, vaddr, filesz, memsz in loads)
    return ehdr + phdrs + b'\x00' * data_size


@pytest.fixture
def elf_core():
    return build_elf_core
