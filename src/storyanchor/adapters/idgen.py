import secrets

from ..core.ports import IdGenerator


class HexId(IdGenerator):
    def __init__(self, nbytes: int = 8):  # 8 bytes -> 16 hex chars
        self.nbytes = nbytes

    def new_id(self) -> str:
        return f"shot-{secrets.token_hex(self.nbytes)}"
