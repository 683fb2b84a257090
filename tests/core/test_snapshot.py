# tests/core/test_snapshot.py
"""
retro_chip8.core.snapshotモジュールの単体テスト。
"""
import pytest
from retro_chip8.core.state import CpuState
from retro_chip8.core.snapshot import Operation, Metadata, Snapshot, UNKNOWN_MNEMONIC
from retro_chip8.transport.bus import BusAccess, BusAccessType

# @intent:test_suite 命令とスナップショットを記録する不変データ構造の検証。

class TestOperation:
    # @intent:test_case_init 既定値（長さ2、サイクル1）で初期化されることを検証します。
    def test_operation_defaults(self):
        op = Operation(opcode_hex="00E0", mnemonic="CLS")
        assert op.operands == []
        assert op.pattern == ""
        assert op.length == 2
        assert op.cycle_count == 1

    def test_word_and_text(self):
        op = Operation(opcode_hex="8124", mnemonic="ADD", operands=["V1", "V2"], pattern="8XY4")
        assert op.word == 0x8124
        assert op.to_text() == "ADD V1, V2"
        assert Operation(opcode_hex="00EE", mnemonic="RET").to_text() == "RET"

    # @intent:test_case_unknown 未定義命令が結果の種別として判別できることを検証します。
    def test_unknown_kind(self):
        assert Operation(opcode_hex="0123", mnemonic=UNKNOWN_MNEMONIC).is_unknown
        assert not Operation(opcode_hex="00E0", mnemonic="CLS").is_unknown

    def test_operation_immutability(self):
        op = Operation(opcode_hex="00E0", mnemonic="CLS")
        with pytest.raises(AttributeError):
            op.mnemonic = "RET"

class TestSnapshot:
    def test_snapshot_init(self):
        state = CpuState(pc=0x202)
        op = Operation(opcode_hex="6005", mnemonic="LD", operands=["V0", "#$05"])
        meta = Metadata(cycle_count=1, symbol_info="start: LD V0, #$05")
        access = BusAccess(0x200, 0x60, BusAccessType.READ)
        snapshot = Snapshot(state=state, operation=op, metadata=meta, address=0x200, bus_activity=[access])

        assert snapshot.state is state
        assert snapshot.address == 0x200
        assert snapshot.metadata.symbol_info == "start: LD V0, #$05"
        assert snapshot.bus_activity[0].previous_data is None

    def test_snapshot_immutability(self):
        snapshot = Snapshot(CpuState(), Operation("00E0", "CLS"), Metadata(0))
        with pytest.raises(AttributeError):
            snapshot.address = 0x300
