"""Test the constrained random walk used to evolve replacement points"""
import chex
import jax
import jax.numpy as jnp
import numpy as np
from absl.testing import absltest, parameterized

from mininest.ns import constrained_random_walk
from mininest.ns.base import PointState

HARMONIC_20 = sum(1.0 / k for k in range(1, 21))


def flat_loglikelihood(x):
    return 0.0 * jnp.sum(x)


def gaussian_loglikelihood(x):
    """Unnormalised Gaussian of width 0.1 centred on the unit square"""
    return -0.5 * jnp.sum(jnp.square(x - 0.5)) / 0.1**2


class ConstrainedRandomWalkTest(chex.TestCase):
    def setUp(self):
        super().setUp()
        self.key = jax.random.key(7)

    @chex.variants(with_jit=True, without_jit=True)
    def test_accepts_everything_above_floor(self):
        """Every trial is accepted, the step grows by exp(1/k) at trial k"""
        kernel = constrained_random_walk.build_kernel(flat_loglikelihood)
        state = constrained_random_walk.init(jnp.array([0.3, 0.6]), flat_loglikelihood)

        new_state, info = self.variant(kernel)(self.key, state, -1.0)

        self.assertEqual(int(info.num_accepted), 20)
        self.assertEqual(int(info.num_rejected), 0)
        np.testing.assert_allclose(
            info.step_size, 0.1 * np.exp(HARMONIC_20), rtol=1e-5
        )
        self.assertFalse(jnp.allclose(new_state.position, state.position))
        self.assertTrue(jnp.all(new_state.position >= 0.0))
        self.assertTrue(jnp.all(new_state.position < 1.0))

    @chex.variants(with_jit=True, without_jit=True)
    def test_rejects_everything_below_floor(self):
        """When no trial beats the floor the point is returned unchanged"""
        kernel = constrained_random_walk.build_kernel(flat_loglikelihood)
        state = constrained_random_walk.init(jnp.array([0.3, 0.6]), flat_loglikelihood)

        new_state, info = self.variant(kernel)(self.key, state, 0.0)

        self.assertEqual(int(info.num_accepted), 0)
        self.assertEqual(int(info.num_rejected), 20)
        chex.assert_trees_all_close(new_state, state)
        np.testing.assert_allclose(
            info.step_size, 0.1 * np.exp(-HARMONIC_20), rtol=1e-5
        )
        self.assertGreater(float(info.step_size), 0.0)

    @parameterized.parameters([0, 1, 2, 3])
    def test_respects_constraint(self, seed):
        kernel = jax.jit(constrained_random_walk.build_kernel(gaussian_loglikelihood))
        start = jnp.array([0.52, 0.47])
        state = constrained_random_walk.init(start, gaussian_loglikelihood)
        loglikelihood_0 = gaussian_loglikelihood(jnp.array([0.6, 0.5]))

        new_state, info = kernel(jax.random.key(seed), state, loglikelihood_0)

        self.assertGreater(float(new_state.loglikelihood), float(loglikelihood_0))
        np.testing.assert_allclose(
            new_state.loglikelihood,
            gaussian_loglikelihood(new_state.position),
            rtol=1e-6,
            atol=1e-6,
        )
        self.assertEqual(int(info.num_accepted + info.num_rejected), 20)
        self.assertGreater(float(info.step_size), 0.0)

    def test_wraps_around_the_edges(self):
        kernel = constrained_random_walk.build_kernel(
            flat_loglikelihood, num_steps=50, initial_step_size=0.4
        )
        start = jnp.array([0.01, 0.99])
        state = constrained_random_walk.init(start, flat_loglikelihood)
        keys = jax.random.split(self.key, 100)

        new_states, _ = jax.vmap(kernel, in_axes=(0, None, None))(keys, state, -1.0)

        self.assertTrue(jnp.all(new_states.position >= 0.0))
        self.assertTrue(jnp.all(new_states.position < 1.0))

    def test_pytree_position(self):
        def loglikelihood_fn(x):
            return -jnp.square(x["u"] - 0.5) - jnp.sum(jnp.square(x["v"] - 0.5))

        kernel = constrained_random_walk.build_kernel(loglikelihood_fn, num_steps=5)
        position = {"u": jnp.array(0.5), "v": jnp.array([0.4, 0.6])}
        state = constrained_random_walk.init(position, loglikelihood_fn)

        new_state, _ = kernel(self.key, state, -1.0)

        chex.assert_trees_all_equal_structs(new_state.position, position)
        chex.assert_trees_all_equal_shapes(new_state.position, position)

    def test_adapt_step_size(self):
        step_size = jnp.array(0.1)
        np.testing.assert_allclose(
            constrained_random_walk.adapt_step_size(step_size, 2, 2), 0.1
        )
        np.testing.assert_allclose(
            constrained_random_walk.adapt_step_size(step_size, 3, 1),
            0.1 * np.exp(1.0 / 3.0),
            rtol=1e-6,
        )
        np.testing.assert_allclose(
            constrained_random_walk.adapt_step_size(step_size, 1, 3),
            0.1 / np.exp(1.0 / 3.0),
            rtol=1e-6,
        )

    def test_invalid_parameters(self):
        with self.assertRaises(ValueError):
            constrained_random_walk.build_kernel(flat_loglikelihood, num_steps=0)
        with self.assertRaises(ValueError):
            constrained_random_walk.build_kernel(
                flat_loglikelihood, initial_step_size=0.0
            )

    def test_point_state_is_the_contract(self):
        centre = jnp.array([0.5, 0.5])
        state = constrained_random_walk.init(centre, gaussian_loglikelihood)
        self.assertIsInstance(state, PointState)
        np.testing.assert_allclose(state.loglikelihood, 0.0)


if __name__ == "__main__":
    absltest.main()
