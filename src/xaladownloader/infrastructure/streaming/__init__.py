from .proxy import StreamingProxy, StreamTransfer, TransferState

__all__ = ["StreamTransfer", "StreamingProxy", "TransferState"]
