# tests/test_tarot_core.py
import pytest

from tarot_gate import tarot_core


def test_registry_has_78_unique_cards():
    names = tarot_core.card_names()
    assert len(names) == 78
    assert len(set(names)) == 78
    assert len({c.id for c in tarot_core.CARD_REGISTRY}) == 78


def test_major_arcana_first():
    majors = [c for c in tarot_core.CARD_REGISTRY if c.suit == "major"]
    assert [c.name for c in majors] == tarot_core.MAJOR_ARCANA
    assert tarot_core.CARD_BY_NAME["Judgement"].rank == "20"
    assert tarot_core.CARD_BY_NAME["Queen of Swords"].id == "minor_swords_queen"


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    deck = tarot_core.card_names()
    original = list(deck)

    shuffled = tarot_core.shuffle_deck(deck, seed="table-1")

    assert deck == original
    assert sorted(shuffled) == sorted(deck)


def test_shuffle_is_reproducible_for_a_seed():
    deck = tarot_core.card_names()
    assert tarot_core.shuffle_deck(deck, seed=42) == tarot_core.shuffle_deck(deck, seed=42)
    assert tarot_core.shuffle_deck(deck, seed="a") != tarot_core.shuffle_deck(deck, seed="b")


@pytest.mark.parametrize("seed", [1.5, True, ["x"]])
def test_shuffle_rejects_bad_seed(seed):
    with pytest.raises(tarot_core.TarotCoreError):
        tarot_core.shuffle_deck(["a", "b"], seed=seed)
