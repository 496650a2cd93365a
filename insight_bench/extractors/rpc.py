from typing import Any, Dict, List, Optional

from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from insight_bench.transformers.units import hex_to_int
from insight_bench.utils.http import HttpClient


BALANCE_OF_SELECTOR = function_signature_to_4byte_selector("balanceOf(address)")


def balance_of_calldata(holder: str) -> str:
    encoded = abi_encode(["address"], [to_checksum_address(holder)])
    return "0x" + (BALANCE_OF_SELECTOR + encoded).hex()


class RpcClient:
    def __init__(self, rpc_url: str, secret_key: Optional[str] = None, timeout: Optional[float] = None) -> None:
        headers = {"x-secret-key": secret_key} if secret_key else None
        self.client = HttpClient(rpc_url, headers=headers, timeout=timeout)
        self._next_id = 1

    def call(self, method: str, params: List[Any]) -> Any:
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        response = self.client.post("", payload)
        if "error" in response:
            error = response["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise RuntimeError(f"RPC error: {message}")
        return response.get("result")

    def balance_of(self, token: str, holder: str, block: str = "latest") -> int:
        """Raw base-unit ERC20 balance via eth_call."""
        result = self.call("eth_call", [{"to": token, "data": balance_of_calldata(holder)}, block])
        return hex_to_int(result)
