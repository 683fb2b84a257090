# retro_chip8/core/snapshot.py
"""
実行状態のスナップショット

このモジュールは、1命令の実行結果（命令の詳細、メタデータ、バスアクティビティ）を
記録するデータ構造を定義します。UIとデバッガへの情報提供に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from retro_chip8.core.state import CpuState
from retro_chip8.transport.bus import BusAccessType, BusAccess

# @intent:constant デコードできなかった命令に付与されるニーモニック。
UNKNOWN_MNEMONIC = "UNKNOWN"


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "8124"
    mnemonic: str # 例: "ADD"
    operands: List[str] = field(default_factory=list) # 例: ["V1", "V2"]
    pattern: str = "" # 命令パターン 例: "8XY4"
    cycle_count: int = 1
    length: int = 2 # 命令のバイト長

    # @intent:accessor 命令ワードを整数として返します。
    @property
    def word(self) -> int:
        return int(self.opcode_hex, 16)

    # @intent:responsibility デコード結果が未定義命令であるかを返します。
    # @intent:rationale 例外ではなく結果の種別としてデコード失敗を表現し、呼び出し側が停止/スキップ/表示を選べるようにします。
    @property
    def is_unknown(self) -> bool:
        return self.mnemonic == UNKNOWN_MNEMONIC

    def to_text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic


# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計命令数、シンボル情報など）を記録するデータクラス。
    """
    cycle_count: int
    symbol_info: Optional[str] = None # 例: "main_loop: JP $200"


# @intent:responsibility ある一時点におけるCPUとバスの状態を記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1命令実行直後のCPU状態、実行した命令、バスアクティビティをまとめたデータ構造。
    stateはCPUが保持するインスタンスへの参照であり、コピーではありません。
    履歴として保持する場合はデバッガ側でコピーを取ります。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    address: int = 0 # 命令が置かれていたアドレス
    bus_activity: List[BusAccess] = field(default_factory=list)
