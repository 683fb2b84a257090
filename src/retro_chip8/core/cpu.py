# retro_chip8/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクルの駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Tuple

from retro_chip8.transport.bus import Bus
from retro_chip8.core.errors import UnknownOpcode
from retro_chip8.core.snapshot import Snapshot, Operation, Metadata
from retro_chip8.core.state import CpuState
from retro_chip8.common.types import SymbolMap, RegisterLayoutInfo

# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルの抽象化を提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0
        self._symbol_map: SymbolMap = {}
        self._reverse_symbol_map: Dict[int, str] = {}
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:responsibility シンボルマップを設定します。
    def set_symbol_map(self, symbol_map: SymbolMap) -> None:
        """
        シンボルマップ（名前とアドレスの対応表）を設定します。
        """
        self._symbol_map = dict(symbol_map)
        # 逆引きマップを作成して、アドレスからラベルを素早く引けるようにする
        self._reverse_symbol_map = {addr: name for name, addr in symbol_map.items()}

    def get_symbol_map(self) -> SymbolMap:
        return self._symbol_map

    def get_bus(self) -> Bus:
        return self._bus

    # @intent:responsibility 実行済み命令数を返します。
    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # @intent:rationale 各CPUアーキテクチャで初期状態が異なるため、抽象メソッドとして定義します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態に戻します。
    def reset(self) -> None:
        """
        CPUのPCとSP、およびその他の状態を初期値にリセットします。
        """
        self._state = self._create_initial_state()
        self._cycle_count = 0

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 保存しておいた状態を復元します。デバッガのステップバックで使用されます。
    def restore_state(self, state: CpuState) -> None:
        """
        渡された状態のコピーを現在の状態とします。
        呼び出し元が保持している状態オブジェクトは変更されません。
        """
        self._state = copy.deepcopy(state)

    # @intent:responsibility 命令を実行できる状態かどうかを返します。
    def _is_ready(self) -> bool:
        """
        Falseの場合、stepは何もせずにNoneを返します。
        """
        return True

    # @intent:responsibility フェッチ前にPCの妥当性を検査するフックです。
    def _check_fetch(self, pc: int) -> None:
        """
        不正なPCの場合は例外を送出します。デフォルトは何もしません。
        """
        return None

    # @intent:responsibility メモリから次の命令ワードを読み出します。PCは変更しません。
    @abstractmethod
    def _fetch(self) -> int:
        pass

    # @intent:responsibility フェッチした命令ワードを解析し、Operationオブジェクトに変換します。
    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        与えられた命令ワードを解析し、その命令のニーモニック、オペランドなどの詳細を
        Operationオブジェクトとして返します。未定義の命令は例外ではなく
        is_unknownがTrueのOperationとして返します。
        """
        pass

    # @intent:responsibility デコードされた命令を実行し、CPUの状態を更新します。
    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        pass

    # @intent:responsibility 命令実行前にPCを更新します。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFFF

    # @intent:responsibility 未定義命令に遭遇した際の処理を行います。
    def _handle_unknown(self, address: int, operation: Operation) -> None:
        raise UnknownOpcode(address, operation.word)

    # @intent:responsibility 指定された命令数だけCPUを進め、最後に実行した命令のスナップショットを返します。
    def step(self, count: int = 1) -> Optional[Snapshot]:
        """
        count個の命令を順番に実行します。
        実行可能な状態でない場合（例: プログラム未ロード）は何もせずNoneを返します。
        途中で例外が発生した場合はその時点で中断し、例外を呼び出し元に伝播します。
        """
        if not self._is_ready():
            return None
        snapshot = None
        for _ in range(count):
            snapshot = self._step_once()
        return snapshot

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー（ログクリア→検査→フェッチ→デコード→PC更新→実行→Snapshot生成）を定義します。
    def _step_once(self) -> Snapshot:
        # 1. 前処理: 前サイクルまでの残存ログを破棄
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc

        # 2. PC検査 (Hook)
        self._check_fetch(initial_pc)

        # 3. フェッチ
        opcode = self._fetch()

        # 4. デコード
        operation = self._decode(opcode)
        if operation.is_unknown:
            # PCを進める前に中断し、未定義命令による副作用を残さない
            self._handle_unknown(initial_pc, operation)

        # 5. PC更新 (Hook)
        self._update_pc(operation)

        # 6. 実行
        self._execute(operation)

        # 7. 後処理 & Snapshot生成
        return self._create_snapshot(initial_pc, operation)

    # @intent:responsibility スナップショットを生成します。
    def _create_snapshot(self, initial_pc: int, operation: Operation) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        self._cycle_count += operation.cycle_count

        symbol_label = self._reverse_symbol_map.get(initial_pc, "")
        symbol_info = f"{symbol_label}: " if symbol_label else ""
        symbol_info += operation.to_text()

        return Snapshot(
            state=self.get_state(),
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info=symbol_info),
            address=initial_pc,
            bus_activity=bus_activity
        )

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        現在のレジスタ値を辞書形式で返す。
        UIやデバッガがCPUの内部構造を知らなくても値を参照できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをUI上でどのように配置・グループ化すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
