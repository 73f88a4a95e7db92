import pytest

from wordle_entropy.frequency import WordFrequencyModel
from wordle_entropy.pattern_cache import PatternCache
from wordle_entropy.words import normalize_words


# Roughly frequency ordered, most common first
VOCAB = normalize_words("""
    about other which their there first would these click price state email
    world music after video where books links years order items group under
    games could great hotel store terms right local those using phone forum
    based black check index being women today south pages found house photo
    power while three total place think north posts media water since guide
    board white small times sites level hours image title shall class still
    money every visit tools reply value press learn print stock point sales
    large table start model human movie march going study staff again never
    users topic below party legal above quote story rates young field paper
    night poker issue range court audio light write offer given files event
    needs might month major areas space cards child enter share added radio
    until color track least trade green close drive short means daily beach
    costs style front parts early miles sound works rules final adult thing
    cheap third gifts cover often watch deals words heart error clear makes
    taken known cases quick whole later basic shows along among death speed
    brand stuff doing loans shoes entry notes force river album views plans
    build types lines apply asked cross weeks lower union names leave woman
    cable score shown flash ideas allow homes super cause focus rooms voice
    comes brown forms glass happy thank prior sport ready round built blood
    earth basis award extra rated quite horse stars lists owner takes bring
    input agent valid grand trial units wrote ships metal funds guest seems
    trust grade panel floor match plays sizes plant fresh crane brace grace
    tares erase raise arise spare scare trace react crate caret cater heard
    geese
""".split())

SMALL_CORPUS = ["crane", "brace", "grace", "house", "light", "water",
                "sound", "plant", "heard", "speed"]


@pytest.fixture(scope="session")
def vocab():
    return list(VOCAB)


@pytest.fixture(scope="session")
def cache():
    return PatternCache.build(VOCAB, VOCAB)


@pytest.fixture(scope="session")
def frequency_model():
    return WordFrequencyModel(VOCAB)


@pytest.fixture(scope="session")
def small_corpus():
    return list(SMALL_CORPUS)
