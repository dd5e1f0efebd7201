"""WebAssembly contract execution.

Contracts are plain WASM modules with no imports that export a ``main``
function taking no arguments. Execution is fuel-metered: the transaction's
gas limit becomes the fuel budget, and running out traps the call.
"""
from __future__ import annotations

from wasmtime import Config, Engine, Func, Instance, Module, Store, Trap, WasmtimeError

from app_logging import get_logger
from exceptions import ContractExecutionError
from metrics import record_contract_execution

DEFAULT_MIN_GAS = 500

_log = get_logger("crawchain.contracts.wasm")


def _engine() -> Engine:
    config = Config()
    config.consume_fuel = True
    return Engine(config)


def execute_wasm_contract(wasm_code: bytes, gas_limit: int, *, min_gas: int = DEFAULT_MIN_GAS) -> None:
    """Compile, instantiate and run a contract's ``main`` export.

    Raises:
        ContractExecutionError: on invalid modules, instantiation failures,
            a gas limit below ``min_gas``, a missing ``main`` export, traps,
            or fuel exhaustion.
    """
    try:
        engine = _engine()
        store = Store(engine)
        store.set_fuel(max(int(gas_limit), 0))
        module = Module(engine, bytes(wasm_code))
        instance = Instance(store, module, [])
    except (WasmtimeError, Trap) as e:
        record_contract_execution("invalid")
        raise ContractExecutionError(str(e)) from e

    if gas_limit < min_gas:
        record_contract_execution("insufficient_gas")
        raise ContractExecutionError("Insufficient gas")

    try:
        main = instance.exports(store)["main"]
    except KeyError as e:
        record_contract_execution("invalid")
        raise ContractExecutionError("failed to find export `main`") from e
    if not isinstance(main, Func):
        record_contract_execution("invalid")
        raise ContractExecutionError("export `main` is not a function")

    try:
        main(store)
    except (WasmtimeError, Trap) as e:
        record_contract_execution("trap")
        _log.warning("contract_trapped", extra={"error": str(e), "gas_limit": gas_limit})
        raise ContractExecutionError(str(e)) from e

    record_contract_execution("ok")
    _log.debug("contract_executed", extra={"gas_limit": gas_limit, "fuel_left": store.get_fuel()})


__all__ = ["execute_wasm_contract", "DEFAULT_MIN_GAS"]
