from .wasm import DEFAULT_MIN_GAS, execute_wasm_contract  # noqa: F401

__all__ = ["execute_wasm_contract", "DEFAULT_MIN_GAS"]
