import os

from elftools.elf.elffile import ELFFile

from coreinject.phdrs import CorePhdrs, update_phdrs

VADDR = 0x400000
DATA_OFFSET = 0x100


def write_core(tmp_path, content):
    path = tmp_path / "core"
    path.write_bytes(content)
    return path


def load_entries(path):
    with open(str(path), "rb") as f:
        elf = ELFFile(f)
        return [(s['p_offset'], s['p_vaddr'], s['p_filesz'], s['p_memsz']) for s in elf.iter_segments()]


def test_extend_filesz(tmp_path, elf_core):
    content = elf_core([(DATA_OFFSET, VADDR, 0, 0x1000)], DATA_OFFSET - 120 + 0x20)
    core = write_core(tmp_path, content)
    size = len(content)

    with open(str(core), "r+b") as f:
        assert update_phdrs(f, [(VADDR + 0x10, 0x10)], size) == size

    assert load_entries(core) == [(DATA_OFFSET, VADDR, 0x20, 0x1000)]
    assert os.path.getsize(str(core)) == size


def test_grow_core(tmp_path, elf_core):
    content = elf_core([(DATA_OFFSET, VADDR, 0, 0x1000)], DATA_OFFSET - 120)
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        assert update_phdrs(f, [(VADDR + 0x800, 0x10)], len(content)) == DATA_OFFSET + 0x810

    assert load_entries(core) == [(DATA_OFFSET, VADDR, 0x810, 0x1000)]
    assert os.path.getsize(str(core)) == DATA_OFFSET + 0x810


def test_filesz_never_shrinks(tmp_path, elf_core):
    content = elf_core([(DATA_OFFSET, VADDR, 0x100, 0x1000)], DATA_OFFSET - 120 + 0x100)
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        update_phdrs(f, [(VADDR, 0x10)], len(content))

    assert core.read_bytes() == content


def test_region_picks_containing_segment(tmp_path, elf_core):
    loads = [(0x200, VADDR, 0, 0x1000),
             (0x200, VADDR + 0x10000, 0, 0x1000)]
    content = elf_core(loads, 0x400)
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        phdrs = CorePhdrs(f)
        assert phdrs.addr_to_segment(VADDR + 0x10010, 4).index == 1
        assert phdrs.addr_to_segment(VADDR + 0xffe, 4) is None
        update_phdrs(f, [(VADDR + 0x10010, 4)], len(content))

    assert load_entries(core) == [(0x200, VADDR, 0, 0x1000),
                                  (0x200, VADDR + 0x10000, 0x14, 0x1000)]


def test_region_outside_segments(tmp_path, elf_core):
    content = elf_core([(DATA_OFFSET, VADDR, 0, 0x1000)], 0x100)
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        assert update_phdrs(f, [(0x10, 4), (VADDR, 0)], len(content)) == len(content)

    assert core.read_bytes() == content


def test_elf32_big_endian(tmp_path, elf_core):
    content = elf_core([(0x80, 0x10000000, 0, 0x1000)], 0x100, elfclass=32, little_endian=False)
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        update_phdrs(f, [(0x10000000, 0x40)], len(content))

    assert load_entries(core) == [(0x80, 0x10000000, 0x40, 0x1000)]


def test_not_elf(tmp_path):
    content = b'\xee' * 0x100
    core = write_core(tmp_path, content)

    with open(str(core), "r+b") as f:
        assert update_phdrs(f, [(0x1000, 0x10)], len(content)) == len(content)

    assert core.read_bytes() == content
