from typing import Any, Dict, List, Optional, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from raffle_toolkit.shared.services.resource_manager import resource_manager


def _canonical_type(param: Dict[str, Any]) -> str:
    """ABI type string of a parameter, expanding tuple components."""
    abi_type = param["type"]
    if not abi_type.startswith("tuple"):
        return abi_type
    inner = ",".join(_canonical_type(c) for c in param.get("components", []))
    return f"({inner}){abi_type[len('tuple'):]}"


def _normalize(abi_type: str, value: Any) -> Any:
    """Checksum decoded addresses so they compare equal to configured ones."""
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type == "address[]":
        return [to_checksum_address(v) for v in value]
    return value


class ContractReader:
    """
    Encodes calls to and decodes results from a contract described by an ABI.

    Only function entries are indexed. Encoding goes through eth_abi directly
    so calldata can be built without a provider, which is what batching
    needs.

    Example:
        pool = ContractReader.from_resource("pool")
        data = pool.encode_call("name")
        name = pool.decode_result("name", await client.eth_call(addr, data))
    """

    _readers: Dict[str, "ContractReader"] = {}

    def __init__(self, abi: List[Dict[str, Any]]):
        self._functions: Dict[str, Dict[str, Any]] = {}
        self._selectors: Dict[bytes, str] = {}

        for entry in abi:
            if entry.get("type") != "function":
                continue
            name = entry["name"]
            self._functions[name] = entry
            self._selectors[self.selector(name)] = name

    @classmethod
    def from_resource(cls, abi_name: str) -> "ContractReader":
        """Reader for a packaged ABI, shared per ABI name"""
        if abi_name not in cls._readers:
            cls._readers[abi_name] = cls(resource_manager.load_abi(abi_name))
        return cls._readers[abi_name]

    @property
    def methods(self) -> List[str]:
        return list(self._functions)

    def has_method(self, method: str) -> bool:
        return method in self._functions

    def _function(self, method: str) -> Dict[str, Any]:
        try:
            return self._functions[method]
        except KeyError:
            raise ValueError(f"Method {method} not found in ABI")

    def input_types(self, method: str) -> List[str]:
        return [_canonical_type(p) for p in self._function(method)["inputs"]]

    def output_types(self, method: str) -> List[str]:
        return [_canonical_type(p) for p in self._function(method)["outputs"]]

    def signature(self, method: str) -> str:
        return f"{method}({','.join(self.input_types(method))})"

    def selector(self, method: str) -> bytes:
        return function_signature_to_4byte_selector(self.signature(method))

    def method_for_selector(self, selector: bytes) -> Optional[str]:
        """Reverse lookup of a 4-byte selector, None if not in this ABI"""
        return self._selectors.get(bytes(selector[:4]))

    def encode_call(self, method: str, args: Sequence[Any] = ()) -> bytes:
        """
        Build calldata for a method.

        Raises:
            ValueError: If the method is not in the ABI
            eth_abi.exceptions.EncodingError: If args do not fit the inputs
        """
        types = self.input_types(method)
        if len(types) != len(args):
            raise ValueError(
                f"{method} expects {len(types)} arguments, got {len(args)}"
            )
        return self.selector(method) + encode(types, list(args))

    def decode_input(self, data: bytes) -> Tuple[str, Tuple[Any, ...]]:
        """Decode calldata back into (method, args)"""
        method = self.method_for_selector(data)
        if method is None:
            raise ValueError(f"Unknown selector 0x{bytes(data[:4]).hex()}")
        return method, decode(self.input_types(method), bytes(data[4:]))

    def decode_result(self, method: str, data: bytes) -> Any:
        """
        Decode return data of a method.

        Single-output methods return the bare value, others a tuple.
        Raises eth_abi.exceptions.DecodingError on empty or short data.
        """
        types = self.output_types(method)
        values = decode(types, bytes(data))
        values = tuple(_normalize(t, v) for t, v in zip(types, values))
        if len(values) == 1:
            return values[0]
        return values

    def encode_result(self, method: str, values: Sequence[Any]) -> bytes:
        """Encode return data of a method (used by local test doubles)"""
        return encode(self.output_types(method), list(values))
