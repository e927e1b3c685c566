import pytest

from factories import (
    EXCHANGE,
    PROVIDER,
    TOKEN,
    UNKNOWN_TOPIC0,
    add_liquidity_log,
    address_topic,
    new_exchange_log,
    remove_liquidity_log,
)

from block_indexer.app.domain.errors import MalformedTopicError
from block_indexer.app.domain.models import EventKind
from block_indexer.app.infrastructure.decoders.mimo.events import (
    MIMO_EVENT_SIGNATURES,
    NEW_EXCHANGE_TOPIC0,
    ExchangeCreated,
    LiquidityChanged,
    MimoEventDecoder,
)


@pytest.fixture
def decoder() -> MimoEventDecoder:
    return MimoEventDecoder()


def test_signature_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        MIMO_EVENT_SIGNATURES["00" * 32] = EventKind.CREATION  # type: ignore[index]


def test_classify_known_events(decoder: MimoEventDecoder) -> None:
    assert decoder.classify(new_exchange_log().topics) is EventKind.CREATION
    assert decoder.classify(add_liquidity_log(iotx_amount=1, token_amount=1).topics) is EventKind.ADDITION
    assert decoder.classify(remove_liquidity_log(iotx_amount=1, token_amount=1).topics) is EventKind.REMOVAL


def test_unknown_and_empty_topics_decode_to_none(decoder: MimoEventDecoder) -> None:
    assert decoder.classify(()) is None
    assert decoder.decode(topics=(), data=b"") is None
    assert decoder.decode(topics=(bytes.fromhex(UNKNOWN_TOPIC0),), data=b"\x01" * 64) is None


def test_decode_new_exchange(decoder: MimoEventDecoder) -> None:
    event = decoder.decode(topics=new_exchange_log().topics, data=b"")

    assert event == ExchangeCreated(token=TOKEN, exchange=EXCHANGE)


def test_decode_add_liquidity(decoder: MimoEventDecoder) -> None:
    log = add_liquidity_log(iotx_amount=2**70, token_amount=5)

    event = decoder.decode(topics=log.topics, data=log.data)

    assert event == LiquidityChanged(
        kind=EventKind.ADDITION,
        provider=PROVIDER,
        iotx_amount=2**70,
        token_amount=5,
    )


def test_remove_liquidity_decodes_unsigned_magnitudes(decoder: MimoEventDecoder) -> None:
    log = remove_liquidity_log(iotx_amount=7, token_amount=2**255)

    event = decoder.decode(topics=log.topics, data=log.data)

    assert isinstance(event, LiquidityChanged)
    assert event.kind is EventKind.REMOVAL
    assert event.iotx_amount == 7
    assert event.token_amount == 2**255


def test_new_exchange_missing_topic(decoder: MimoEventDecoder) -> None:
    topics = (bytes.fromhex(NEW_EXCHANGE_TOPIC0), address_topic(TOKEN))

    with pytest.raises(MalformedTopicError):
        decoder.decode(topics=topics, data=b"")


def test_liquidity_missing_amount_topic(decoder: MimoEventDecoder) -> None:
    topics = add_liquidity_log(iotx_amount=1, token_amount=1).topics[:3]

    with pytest.raises(MalformedTopicError):
        decoder.decode(topics=topics, data=b"")


def test_malformed_address_topic(decoder: MimoEventDecoder) -> None:
    topics = (bytes.fromhex(NEW_EXCHANGE_TOPIC0), b"\x01" * 31, address_topic(EXCHANGE))

    with pytest.raises(MalformedTopicError):
        decoder.decode(topics=topics, data=b"")
