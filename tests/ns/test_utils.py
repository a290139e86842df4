"""Test the helpers that consume and summarise nested sampling runs"""
import chex
import jax
import jax.numpy as jnp
import numpy as np
from absl.testing import absltest

from mininest.ns import base, utils


def make_info(logWt, particles, H):
    """Stacked records of a fictitious run whose evidence is normalised to 1"""
    logWt = jnp.asarray(logWt)
    num_steps = logWt.shape[0]
    logZ = jnp.log(jnp.cumsum(jnp.exp(logWt)))
    return base.NSInfo(
        H=jnp.asarray(H),
        logZ=logZ,
        logWt=logWt,
        particles=jnp.asarray(particles),
        loglikelihood=jnp.zeros(num_steps),
        dead_idx=jnp.zeros(num_steps, dtype=jnp.int32),
        start_idx=jnp.ones(num_steps, dtype=jnp.int32),
        explore_info=(),
    )


class UtilsTest(chex.TestCase):
    def setUp(self):
        super().setUp()
        self.info = make_info(
            logWt=jnp.log(jnp.array([0.25, 0.75])),
            particles=jnp.array([[0.0, 0.2], [1.0, 0.6]]),
            H=jnp.array([0.5, 4.0]),
        )

    def test_uniform_prior(self):
        particles = utils.uniform_prior(jax.random.key(0), num_live=64, ndim=3)
        chex.assert_shape(particles, (64, 3))
        self.assertTrue(jnp.all((particles >= 0.0) & (particles < 1.0)))

    def test_posterior_weights(self):
        weights = utils.posterior_weights(self.info)
        np.testing.assert_allclose(weights, jnp.array([0.25, 0.75]), rtol=1e-6)

    def test_weighted_moments(self):
        mean, std = utils.weighted_moments(self.info)
        np.testing.assert_allclose(mean, jnp.array([0.75, 0.5]), rtol=1e-6)
        np.testing.assert_allclose(
            std, jnp.array([np.sqrt(0.75 * 0.25), np.sqrt(0.03)]), rtol=1e-4
        )

    def test_weighted_moments_transformed(self):
        def to_physical(u):
            return {"x": 4.0 * u[0] - 2.0, "y": 2.0 * u[1]}

        mean, std = utils.weighted_moments(self.info, to_physical)

        np.testing.assert_allclose(mean["x"], 1.0, rtol=1e-6)
        np.testing.assert_allclose(mean["y"], 1.0, rtol=1e-6)
        np.testing.assert_allclose(std["x"], 4.0 * np.sqrt(0.75 * 0.25), rtol=1e-4)

    def test_evidence_error(self):
        error = utils.evidence_error(self.info)
        np.testing.assert_allclose(error, np.sqrt(2.0), rtol=1e-6)

    def test_log_summary(self):
        with self.assertLogs("mininest.ns.utils", level="INFO") as logs:
            utils.log_summary(self.info)

        self.assertEqual(logs.output[0], "INFO:mininest.ns.utils:# iterates = 2")
        self.assertIn("Evidence: ln(Z) = ", logs.output[1])
        self.assertIn("+- 1.41421", logs.output[1])
        self.assertIn("H = 4.00000 nats = 5.77078 bits", logs.output[2])


if __name__ == "__main__":
    absltest.main()
