import can
from typing import List, Union

from .constants import CAN_EXTENDED_ID_MAX, CAN_MAX_DATA_LENGTH, CAN_STANDARD_ID_MAX
from .serializer import ByteWriter


def split_frames(
    data: bytes, arbitration_id: int, is_extended_id: bool = True
) -> List[can.Message]:
    """
    Splits a payload into CAN messages of at most 8 data bytes each, in order.

    Args:
        data: The payload, usually ByteWriter.to_bytes()
        arbitration_id: CAN ID used for every frame
        is_extended_id: Whether the ID is a 29-bit extended ID
    """
    id_max = CAN_EXTENDED_ID_MAX if is_extended_id else CAN_STANDARD_ID_MAX
    if not 0 <= arbitration_id <= id_max:
        raise ValueError(
            f"Arbitration ID {hex(arbitration_id)} out of range (0 to {hex(id_max)})"
        )

    return [
        can.Message(
            arbitration_id=arbitration_id,
            data=data[offset : offset + CAN_MAX_DATA_LENGTH],
            is_extended_id=is_extended_id,
        )
        for offset in range(0, len(data), CAN_MAX_DATA_LENGTH)
    ]


class FrameSender(object):
    """
    Sends encoded payloads over a python-can bus, one frame per 8 bytes.
    The receiver must know the payload length out of band; nothing is added to the frames.
    """

    debug: bool = False
    """
    Set to true to display every frame sent.
    """

    def __init__(self, bus: can.BusABC, is_extended_id: bool = True) -> None:
        """
        Args:
            bus: An open python-can bus. The sender does not own it and never shuts it down.
            is_extended_id: Whether arbitration IDs are 29-bit extended IDs
        """
        self.bus = bus
        self.is_extended_id = is_extended_id

    def send(self, payload: Union[bytes, ByteWriter], arbitration_id: int) -> int:
        """
        Sends the payload and returns the number of frames sent.

        Args:
            payload: Raw bytes, or a ByteWriter whose current contents are sent
            arbitration_id: CAN ID for every frame
        """
        data = payload.to_bytes() if isinstance(payload, ByteWriter) else bytes(payload)
        frames = split_frames(data, arbitration_id, self.is_extended_id)

        for index, message in enumerate(frames):
            if self.debug:
                print(
                    f"ID: {hex(arbitration_id)}   Frame {index + 1}/{len(frames)}: "
                    f"[{', '.join(hex(d) for d in message.data)}]"
                )
            try:
                self.bus.send(message)
            except can.CanError as e:
                raise RuntimeError(
                    f"Failed to send frame {index + 1}/{len(frames)} with ID {hex(arbitration_id)}: {e}"
                ) from e

        return len(frames)
