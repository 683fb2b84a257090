# tests/loader/test_symbol_integration.py
from retro_chip8.loader.loader import AssemblyLoader


def test_symbol_integration(make_machine, tmp_path):
    cpu, _ = make_machine()

    asm_content = """
START:
    CLS
    LD V0, #$AA
LOOP:
    JP LOOP
    """
    asm_file = tmp_path / "temp.asm"
    asm_file.write_text(asm_content)

    symbols = AssemblyLoader().load_assembly(str(asm_file), cpu)

    assert symbols["START"] == 0x200
    assert symbols["LOOP"] == 0x204

    # Step START
    snap = cpu.step()
    assert snap.metadata.symbol_info == "START: CLS"

    # Step LD V0, #$AA (ラベルなし)
    snap = cpu.step()
    assert snap.metadata.symbol_info == "LD V0, #$AA"

    snap = cpu.step()
    assert snap.metadata.symbol_info == "LOOP: JP $204"
    assert cpu.get_state().pc == 0x204
