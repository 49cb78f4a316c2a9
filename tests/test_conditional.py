"""Tests for discretebayes.distributions.conditional and signature."""

from __future__ import annotations

import numpy as np
import pytest
from scipy import stats

from discretebayes.core.context import SamplingContext, reset_default_rng
from discretebayes.core.exceptions import (
    MissingEvidenceError,
    UnsupportedArityError,
)
from discretebayes.core.potential import Potential
from discretebayes.core.types import Assignment, DiscreteKey
from discretebayes.distributions.conditional import DiscreteConditional
from discretebayes.distributions.signature import Signature

A = DiscreteKey("A", 2)
B = DiscreteKey("B", 3)
C = DiscreteKey("C", 2)


def _p_b_given_a() -> DiscreteConditional:
    return DiscreteConditional.from_signature(
        Signature(B, [A], [[0.2, 0.5, 0.3],
                           [0.6, 0.1, 0.3]])
    )


def _p_bc_given_a() -> DiscreteConditional:
    """Two frontals (B, C) given A, built from a random joint."""
    rng = np.random.default_rng(0)
    joint = Potential(["B", "C", "A"], [3, 2, 2], rng.random((3, 2, 2)))
    return DiscreteConditional.from_joint(2, joint)


# ============================================================ Signature


class TestSignature:
    """Signature builds normalized literal CPTs."""

    def test_rows_are_normalized(self):
        sig = Signature(C, [A], [[1, 3], [2, 2]])
        np.testing.assert_allclose(sig.table, [[0.25, 0.75], [0.5, 0.5]])

    def test_discrete_keys_order(self):
        sig = Signature(B, [A, C], np.ones((2, 2, 3)))
        assert sig.discrete_keys() == [B, A, C]
        assert sig.cpt().shape == (3, 2, 2)

    def test_root_signature(self):
        sig = Signature(A, [], [0.3, 0.7])
        np.testing.assert_allclose(sig.cpt(), [0.3, 0.7])

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError, match="does not match"):
            Signature(B, [A], [[0.5, 0.5], [0.5, 0.5]])

    def test_negative_raises(self):
        with pytest.raises(ValueError, match="non-negative"):
            Signature(A, [], [-0.5, 1.5])

    def test_zero_row_raises(self):
        with pytest.raises(ValueError, match="positive mass"):
            Signature(C, [A], [[0, 0], [1, 1]])

    def test_missing_table_raises(self):
        with pytest.raises(ValueError, match="table"):
            Signature(A)


# ============================================================ Construction


class TestConstruction:
    """The four ways to build a conditional."""

    def test_from_signature(self):
        cond = _p_b_given_a()
        assert cond.frontals == ["B"]
        assert cond.parents == ["A"]
        assert cond.n_frontals == 1
        assert cond.n_parents == 1
        assert cond.first_frontal_key == "B"
        assert cond.frontal_keys == [B]
        assert cond.parent_keys == [A]
        assert cond({"A": 1, "B": 0}) == pytest.approx(0.6)

    def test_from_joint(self):
        joint = Potential(["C", "A"], [2, 2], np.array([[0.1, 0.3],
                                                        [0.2, 0.4]]))
        cond = DiscreteConditional.from_joint(1, joint)
        assert cond.frontals == ["C"]
        assert cond.parents == ["A"]
        assert cond({"C": 0, "A": 0}) == pytest.approx(1 / 3)
        assert cond({"C": 1, "A": 1}) == pytest.approx(4 / 7)

    def test_from_joint_and_marginal(self):
        joint = Potential(["A", "C"], [2, 2], np.array([[0.1, 0.3],
                                                        [0.2, 0.4]]))
        marginal = joint.marginalize(["C"])
        cond = DiscreteConditional.from_joint_and_marginal(joint, marginal)
        # frontal count is |vars(J)| - |vars(M)|, frontal is C
        assert cond.n_frontals == 1
        assert cond.frontals == ["C"]
        assert cond.parents == ["A"]
        assert cond({"A": 0, "C": 1}) == pytest.approx(0.75)
        assert cond({"A": 1, "C": 0}) == pytest.approx(1 / 3)

    def test_from_joint_and_marginal_ordered_keys(self):
        joint = Potential(["A", "C", "B"], [2, 2, 3],
                          np.arange(1, 13, dtype=float).reshape(2, 2, 3))
        marginal = joint.marginalize(["C"])
        default = DiscreteConditional.from_joint_and_marginal(joint, marginal)
        reordered = DiscreteConditional.from_joint_and_marginal(
            joint, marginal, ordered_keys=[C, B, A]
        )
        assert default.variables == ["C", "A", "B"]
        assert reordered.variables == ["C", "B", "A"]
        assert reordered.n_frontals == 1
        assert reordered.equals(default)

    def test_ordered_keys_not_permutation(self):
        joint = Potential(["A", "C"], [2, 2], np.ones((2, 2)))
        marginal = joint.marginalize(["C"])
        with pytest.raises(ValueError, match="permutation"):
            DiscreteConditional.from_joint_and_marginal(
                joint, marginal, ordered_keys=["C", "B"]
            )

    def test_marginal_not_subset(self):
        joint = Potential(["A", "C"], [2, 2], np.ones((2, 2)))
        marginal = Potential(["B"], [3], np.ones(3))
        with pytest.raises(ValueError, match="not in the joint"):
            DiscreteConditional.from_joint_and_marginal(joint, marginal)

    def test_no_frontal_left(self):
        joint = Potential(["A"], [2], np.ones(2))
        with pytest.raises(ValueError, match="no frontal"):
            DiscreteConditional.from_joint_and_marginal(joint, joint)

    def test_bad_frontal_count(self):
        with pytest.raises(ValueError, match="n_frontals"):
            DiscreteConditional(0, ["A"], [2], [0.5, 0.5])

    def test_to_string(self):
        text = _p_b_given_a().to_string()
        assert text.startswith("P( B | A )")


# ============================================================ Normalization


class TestNormalization:
    """For every parent value the frontal table sums to one."""

    @pytest.mark.parametrize("cardinality", [1, 2, 3, 5, 8])
    def test_from_joint_normalized(self, cardinality):
        rng = np.random.default_rng(cardinality)
        joint = Potential(["X", "P", "Q"], [cardinality, 3, 2],
                          rng.random((cardinality, 3, 2)))
        cond = DiscreteConditional.from_joint(1, joint)
        for evidence in Assignment.cartesian_product(cond.parent_keys):
            total = sum(
                cond.choose(evidence)({"X": v}) for v in range(cardinality)
            )
            assert abs(total - 1.0) < 1e-9

    def test_multi_frontal_normalized(self):
        cond = _p_bc_given_a()
        for a in range(2):
            table = cond.choose({"A": a})
            assert table.variables == ["B", "C"]
            assert abs(table.values.sum() - 1.0) < 1e-9


# ============================================================ choose


class TestChoose:
    """Evidence restriction."""

    def test_choose_restricts_parents(self):
        table = _p_b_given_a().choose({"A": 1})
        assert table.variables == ["B"]
        np.testing.assert_allclose(table.values, [0.6, 0.1, 0.3])

    def test_choose_ignores_extra_evidence(self):
        table = _p_b_given_a().choose({"A": 0, "B": 2, "Z": 7})
        np.testing.assert_allclose(table.values, [0.2, 0.5, 0.3])

    def test_choose_missing_parent_raises(self):
        with pytest.raises(MissingEvidenceError) as excinfo:
            _p_b_given_a().choose({"B": 0})
        assert excinfo.value.variable == "A"

    def test_choose_none_parent_raises(self):
        with pytest.raises(MissingEvidenceError) as excinfo:
            _p_b_given_a().choose({"A": None})
        assert excinfo.value.variable == "A"
        with pytest.raises(MissingEvidenceError):
            _p_b_given_a().sample({"A": None}, np.random.default_rng(0))

    def test_choose_root_needs_no_evidence(self):
        root = DiscreteConditional.from_signature(Signature(A, [], [0.3, 0.7]))
        np.testing.assert_allclose(root.choose({}).values, [0.3, 0.7])

    def test_choose_does_not_mutate(self):
        cond = _p_b_given_a()
        before = cond.values.copy()
        cond.choose({"A": 0})
        np.testing.assert_array_equal(cond.values, before)

    def test_choose_as_factor(self):
        factor = _p_b_given_a().choose_as_factor({"A": 0})
        assert not isinstance(factor, DiscreteConditional)
        assert factor.keys == [B]
        np.testing.assert_allclose(factor.values, [0.2, 0.5, 0.3])

    def test_choose_as_factor_arity(self):
        with pytest.raises(UnsupportedArityError):
            _p_bc_given_a().choose_as_factor({"A": 0})


# ============================================================ MPE


class TestSolve:
    """Most probable explanation."""

    def test_solve_returns_argmax(self):
        cond = _p_b_given_a()
        assert cond.solve({"A": 0}) == 1
        assert cond.solve({"A": 1}) == 0

    def test_solve_tie_goes_to_lowest(self):
        cond = DiscreteConditional.from_signature(
            Signature(B, [A], [[0.2, 0.4, 0.4],
                               [0.5, 0.0, 0.5]])
        )
        assert cond.solve({"A": 0}) == 1
        assert cond.solve({"A": 1}) == 0

    def test_solve_matches_choose(self):
        cond = _p_b_given_a()
        for a in range(2):
            table = cond.choose({"A": a})
            best = cond.solve({"A": a})
            for v in range(3):
                assert table({"B": best}) >= table({"B": v})

    def test_solve_missing_parent(self):
        with pytest.raises(MissingEvidenceError):
            _p_b_given_a().solve({})

    def test_solve_arity(self):
        with pytest.raises(UnsupportedArityError):
            _p_bc_given_a().solve({"A": 0})

    def test_solve_in_place_single(self):
        values = Assignment({"A": 0, "Z": 4})
        _p_b_given_a().solve_in_place(values)
        assert values == {"A": 0, "Z": 4, "B": 1}

    def test_solve_in_place_multi_frontal(self):
        cond = _p_bc_given_a()
        for a in range(2):
            values = Assignment({"A": a})
            cond.solve_in_place(values)
            table = cond.choose({"A": a})
            assert table(values) == pytest.approx(table.values.max())
            assert values["A"] == a

    def test_solve_in_place_tie_first_enumerated(self):
        """B varies fastest, so (B=2, C=0) precedes (B=0, C=1)."""
        values = np.zeros((3, 2))
        values[2, 0] = 0.5
        values[0, 1] = 0.5
        cond = DiscreteConditional(2, ["B", "C"], [3, 2], values)
        result = Assignment()
        cond.solve_in_place(result)
        assert result == {"B": 2, "C": 0}

    def test_solve_in_place_all_zero(self):
        cond = DiscreteConditional(1, ["B", "A"], [3, 2], np.zeros((3, 2)))
        values = Assignment({"A": 1})
        cond.solve_in_place(values)
        assert values["B"] == 0


# ============================================================ Sampling


class TestSample:
    """Sampling a single frontal variable."""

    def test_shortcut_on_certain_value(self):
        cond = DiscreteConditional.from_signature(
            Signature(B, [A], [[0.0, 1.0, 0.0],
                               [0.3, 0.3, 0.4]])
        )
        reset_default_rng(123)
        assert all(cond.sample({"A": 0}) == 1 for _ in range(50))

    def test_shortcut_does_not_advance_generator(self):
        cond = DiscreteConditional.from_signature(
            Signature(C, [A], [[1.0, 0.0], [0.5, 0.5]])
        )
        rng = np.random.default_rng(5)
        state = rng.bit_generator.state
        cond.sample({"A": 0}, rng=rng)
        assert rng.bit_generator.state == state

    def test_sample_distribution(self):
        """Empirical frequencies match choose() (chi-squared test)."""
        cond = _p_b_given_a()
        rng = np.random.default_rng(42)
        n = 10_000
        draws = np.array([cond.sample({"A": 0}, rng=rng) for _ in range(n)])
        observed = np.bincount(draws, minlength=3)
        expected = cond.choose({"A": 0}).values * n
        _, p_value = stats.chisquare(observed, expected)
        assert p_value > 0.001

    def test_shared_generator_reproducible(self):
        cond = _p_b_given_a()
        reset_default_rng()
        first = [cond.sample({"A": 1}) for _ in range(20)]
        reset_default_rng()
        second = [cond.sample({"A": 1}) for _ in range(20)]
        assert first == second

    def test_sampling_context(self):
        cond = _p_b_given_a()
        with SamplingContext(seed=9):
            first = [cond.sample({"A": 0}) for _ in range(20)]
        with SamplingContext(seed=9):
            second = [cond.sample({"A": 0}) for _ in range(20)]
        assert first == second

    def test_sample_in_place(self):
        values = Assignment({"A": 0})
        _p_b_given_a().sample_in_place(values, rng=np.random.default_rng(0))
        assert set(values) == {"A", "B"}
        assert 0 <= values["B"] < 3

    def test_sample_missing_parent(self):
        with pytest.raises(MissingEvidenceError):
            _p_b_given_a().sample({})

    def test_sample_arity(self):
        with pytest.raises(UnsupportedArityError):
            _p_bc_given_a().sample({"A": 0})
        with pytest.raises(UnsupportedArityError):
            _p_bc_given_a().sample_in_place(Assignment({"A": 0}))


# ============================================================ equals


class TestEquals:
    """Structural comparison."""

    @pytest.mark.parametrize("tol", [0.0, 1e-9, 1.0])
    def test_equals_self(self, tol):
        cond = _p_b_given_a()
        assert cond.equals(cond, tol)

    def test_equals_plain_potential(self):
        cond = _p_b_given_a()
        same = Potential(cond.variables, cond.cardinalities, cond.values.copy())
        assert cond.equals(same)

    def test_equals_other_type(self):
        assert not _p_b_given_a().equals(object())

    def test_not_equal_different_table(self):
        other = DiscreteConditional.from_signature(
            Signature(B, [A], [[0.3, 0.4, 0.3],
                               [0.6, 0.1, 0.3]])
        )
        assert not _p_b_given_a().equals(other, 1e-3)
