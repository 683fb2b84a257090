# src/retro_chip8/arch/chip8/instructions/__init__.py
"""
CHIP-8命令セット実装パッケージ。
"""
from retro_chip8.transport.bus import Bus
from retro_chip8.core.snapshot import Operation, UNKNOWN_MNEMONIC
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import Peripherals, operand_fields
from .maps import DECODE_MAP, EXECUTE_MAP, resolve_pattern

# @intent:responsibility 16bitの命令ワードをデコードします。
def decode_opcode(word: int) -> Operation:
    """
    命令ワードをデコードし、Operationオブジェクトを返します。
    定義されていない命令ワードはmnemonicがUNKNOWNのOperationとして返します。
    デコードは副作用を持ちません。
    """
    word &= 0xFFFF
    pattern = resolve_pattern(word)
    if pattern is None:
        return Operation(
            opcode_hex=f"{word:04X}",
            mnemonic=UNKNOWN_MNEMONIC,
            operands=[f"${word:04X}"],
        )
    mnemonic, templates = DECODE_MAP[pattern]
    fields = operand_fields(word)
    return Operation(
        opcode_hex=f"{word:04X}",
        mnemonic=mnemonic,
        operands=[template.format(**fields) for template in templates],
        pattern=pattern,
    )

# @intent:responsibility デコードされた命令を実行します。
def execute_instruction(operation: Operation, state: Chip8CpuState, bus: Bus, io: Peripherals) -> None:
    """
    デコードされた命令を実行し、マシンの状態を変更します。
    """
    executor = EXECUTE_MAP.get(operation.pattern)
    if executor is None:
        raise KeyError(f"No executor registered for pattern '{operation.pattern}'.")
    executor(state, bus, io, operation)
