"""Pydantic models for the EMQ HTTP API payloads.

Every payload is wrapped as ``{"result": ..., "code": ...}``. Missing fields
and JSON null fall back to zero values and unknown fields are ignored. A
value of the wrong JSON type, such as "7000" or true for an integer, makes a
response undecodable.
"""

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictInt, StrictStr
from typing import Annotated, Callable, List, Optional


def _or_zero(zero: Callable[[], object]) -> AfterValidator:
    """Replace a decoded null with the zero value built by ``zero``."""
    return AfterValidator(lambda value: zero() if value is None else value)


ZeroInt = Annotated[Optional[StrictInt], _or_zero(int)]
ZeroStr = Annotated[Optional[StrictStr], _or_zero(str)]


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class NodeStatus(_Payload):
    """Health and resource usage of a single node."""
    name: ZeroStr = ""
    otp_release: ZeroStr = ""
    node_status: ZeroStr = ""
    memory_total: ZeroStr = ""  # Human readable, e.g. "128.5MB"
    memory_used: ZeroStr = ""
    process_available: ZeroInt = 0
    process_used: ZeroInt = 0
    max_fds: ZeroInt = 0
    clients: ZeroInt = 0
    load1: ZeroStr = ""
    load5: ZeroStr = ""
    load15: ZeroStr = ""


class ProtocolCounters(_Payload):
    """MQTT packet, message and byte counters of a node."""
    bytes_received: ZeroInt = Field(0, alias="bytes/received")
    bytes_sent: ZeroInt = Field(0, alias="bytes/sent")
    messages_dropped: ZeroInt = Field(0, alias="messages/dropped")
    messages_qos0_received: ZeroInt = Field(0, alias="messages/qos0/received")
    messages_qos0_sent: ZeroInt = Field(0, alias="messages/qos0/sent")
    messages_qos1_received: ZeroInt = Field(0, alias="messages/qos1/received")
    messages_qos1_sent: ZeroInt = Field(0, alias="messages/qos1/sent")
    messages_qos2_dropped: ZeroInt = Field(0, alias="messages/qos2/dropped")
    messages_qos2_received: ZeroInt = Field(0, alias="messages/qos2/received")
    messages_qos2_sent: ZeroInt = Field(0, alias="messages/qos2/sent")
    messages_received: ZeroInt = Field(0, alias="messages/received")
    messages_retained: ZeroInt = Field(0, alias="messages/retained")
    messages_sent: ZeroInt = Field(0, alias="messages/sent")
    packets_connack: ZeroInt = Field(0, alias="packets/connack")
    packets_connect: ZeroInt = Field(0, alias="packets/connect")
    packets_disconnect: ZeroInt = Field(0, alias="packets/disconnect")
    packets_pingreq: ZeroInt = Field(0, alias="packets/pingreq")
    packets_pingresp: ZeroInt = Field(0, alias="packets/pingresp")
    packets_puback_missed: ZeroInt = Field(0, alias="packets/puback/missed")
    packets_puback_received: ZeroInt = Field(0, alias="packets/puback/received")
    packets_puback_sent: ZeroInt = Field(0, alias="packets/puback/sent")
    packets_pubcomp_missed: ZeroInt = Field(0, alias="packets/pubcomp/missed")
    packets_pubcomp_received: ZeroInt = Field(0, alias="packets/pubcomp/received")
    packets_pubcomp_sent: ZeroInt = Field(0, alias="packets/pubcomp/sent")
    packets_publish_received: ZeroInt = Field(0, alias="packets/publish/received")
    packets_publish_sent: ZeroInt = Field(0, alias="packets/publish/sent")
    packets_pubrec_missed: ZeroInt = Field(0, alias="packets/pubrec/missed")
    packets_pubrec_received: ZeroInt = Field(0, alias="packets/pubrec/received")
    packets_pubrec_sent: ZeroInt = Field(0, alias="packets/pubrec/sent")
    packets_pubrel_missed: ZeroInt = Field(0, alias="packets/pubrel/missed")
    packets_pubrel_received: ZeroInt = Field(0, alias="packets/pubrel/received")
    packets_pubrel_sent: ZeroInt = Field(0, alias="packets/pubrel/sent")
    packets_received: ZeroInt = Field(0, alias="packets/received")
    packets_sent: ZeroInt = Field(0, alias="packets/sent")
    packets_suback: ZeroInt = Field(0, alias="packets/suback")
    packets_subscribe: ZeroInt = Field(0, alias="packets/subscribe")
    packets_unsuback: ZeroInt = Field(0, alias="packets/unsuback")
    packets_unsubscribe: ZeroInt = Field(0, alias="packets/unsubscribe")


class BrokerStats(_Payload):
    """Current and peak counts of broker managed resources."""
    clients_count: ZeroInt = Field(0, alias="clients/count")
    clients_max: ZeroInt = Field(0, alias="clients/max")
    retained_count: ZeroInt = Field(0, alias="retained/count")
    retained_max: ZeroInt = Field(0, alias="retained/max")
    routes_count: ZeroInt = Field(0, alias="routes/count")
    routes_max: ZeroInt = Field(0, alias="routes/max")
    sessions_count: ZeroInt = Field(0, alias="sessions/count")
    sessions_max: ZeroInt = Field(0, alias="sessions/max")
    subscribers_count: ZeroInt = Field(0, alias="subscribers/count")
    subscribers_max: ZeroInt = Field(0, alias="subscribers/max")
    subscriptions_count: ZeroInt = Field(0, alias="subscriptions/count")
    subscriptions_max: ZeroInt = Field(0, alias="subscriptions/max")
    topics_count: ZeroInt = Field(0, alias="topics/count")
    topics_max: ZeroInt = Field(0, alias="topics/max")


class ClusterNode(_Payload):
    """One entry of the cluster membership list."""
    name: ZeroStr = ""
    version: ZeroStr = ""
    sysdescr: ZeroStr = ""
    uptime: ZeroStr = ""
    datetime: ZeroStr = ""
    otp_release: ZeroStr = ""
    node_status: ZeroStr = ""


ClusterMember = Annotated[Optional[ClusterNode], _or_zero(ClusterNode)]


class NodeStatusResponse(_Payload):
    result: Annotated[Optional[NodeStatus], _or_zero(NodeStatus)] = Field(
        default_factory=NodeStatus
    )
    code: ZeroInt = 0


class ProtocolCountersResponse(_Payload):
    result: Annotated[Optional[ProtocolCounters], _or_zero(ProtocolCounters)] = Field(
        default_factory=ProtocolCounters
    )
    code: ZeroInt = 0


class BrokerStatsResponse(_Payload):
    result: Annotated[Optional[BrokerStats], _or_zero(BrokerStats)] = Field(
        default_factory=BrokerStats
    )
    code: ZeroInt = 0


class ClusterMembershipResponse(_Payload):
    result: Annotated[Optional[List[ClusterMember]], _or_zero(list)] = Field(default_factory=list)
    code: ZeroInt = 0

    def find_node(self, name: str) -> ClusterNode:
        """
        Return the first member named exactly ``name``.

        A missing member is not an error; an empty record is returned so
        derived labels stay empty.
        """
        for member in self.result:
            if member.name == name:
                return member
        return ClusterNode()
