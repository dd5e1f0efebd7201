import pytest

from chain.blockchain import Blockchain
from consensus import ProofOfStake, get_consensus
from models.block import Block
from models.transaction import Token, Transaction


def _tx(gas_limit):
    return Transaction(sender="a", receiver="b", token=Token.custody(1.0), nonce=1, gas_limit=gas_limit)


class TestProofOfStake:
    def test_validate_block_requires_gas(self):
        pos = ProofOfStake()
        assert pos.validate_block(Block.new(1, [_tx(1), _tx(5)], "0", 0))
        assert not pos.validate_block(Block.new(1, [_tx(1), _tx(0)], "0", 0))
        assert pos.validate_block(Block.genesis(0))

    def test_select_validator_empty(self):
        assert ProofOfStake().select_validator({}, "seed") is None
        assert ProofOfStake().select_validator({"v1": 0.0}, "seed") is None

    def test_select_validator_is_deterministic(self):
        stakes = {"v1": 10.0, "v2": 30.0, "v3": 60.0}
        pos = ProofOfStake()
        picks = {pos.select_validator(stakes, "abc") for _ in range(5)}
        assert len(picks) == 1
        assert picks.pop() in stakes

    def test_select_validator_is_stake_weighted(self):
        stakes = {"small": 1.0, "big": 99.0}
        pos = ProofOfStake()
        picks = [pos.select_validator(stakes, f"seed-{i}") for i in range(400)]
        assert picks.count("big") > picks.count("small")

    def test_min_stake_filters_validators(self):
        pos = ProofOfStake(min_stake=50.0)
        stakes = {"small": 10.0, "big": 60.0}
        assert all(pos.select_validator(stakes, f"s{i}") == "big" for i in range(20))

    def test_penalize(self):
        stakes = {"v1": 100.0}
        slashed = ProofOfStake().penalize(stakes, "v1", 0.25)
        assert slashed == 25.0
        assert stakes["v1"] == 75.0
        assert ProofOfStake().penalize(stakes, "unknown", 0.5) == 0.0

    @pytest.mark.parametrize("fraction", [-0.1, 1.5])
    def test_penalize_rejects_bad_fraction(self, fraction):
        with pytest.raises(ValueError):
            ProofOfStake().penalize({"v1": 1.0}, "v1", fraction)


def test_get_consensus():
    assert isinstance(get_consensus("PoS"), ProofOfStake)
    with pytest.raises(ValueError):
        get_consensus("pow")


class TestChainStakes:
    def test_stake_registers_validator_once(self):
        chain = Blockchain()
        assert chain.stake("v1", 10.0) == 10.0
        assert chain.stake("v1", 5.0) == 15.0
        assert chain.validators == ["v1"]

    @pytest.mark.parametrize("amount", [0.0, -1.0, float("nan")])
    def test_stake_rejects_non_positive(self, amount):
        with pytest.raises(ValueError):
            Blockchain().stake("v1", amount)

    def test_select_and_penalize_through_chain(self):
        chain = Blockchain()
        assert chain.select_validator(0) is None
        chain.stake("v1", 10.0)
        assert chain.select_validator(0) == "v1"
        assert chain.penalize("v1", 0.5) == 5.0
        assert chain.stakes["v1"] == 5.0
