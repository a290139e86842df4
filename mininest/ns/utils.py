# Copyright 2020- The Mininest Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Utility functions for running nested sampling and using its results.

The sampler itself never stops: `stream` turns it into an infinite iterator
of `NSInfo` records and the caller decides how many of them to consume, for
instance with `collect`. The remaining helpers turn a collected run into
posterior weights, weighted moments and a summary of the evidence.
"""
import itertools
import logging
import math
from typing import Callable, Iterator, Optional

import jax
import jax.numpy as jnp

from mininest.base import SamplingAlgorithm
from mininest.ns.base import NSInfo, NSState
from mininest.types import Array, ArrayLikeTree, ArrayTree, PRNGKey

__all__ = [
    "uniform_prior",
    "stream",
    "collect",
    "posterior_weights",
    "weighted_moments",
    "evidence_error",
    "log_summary",
]

logger = logging.getLogger(__name__)


def uniform_prior(rng_key: PRNGKey, num_live: int, ndim: int) -> Array:
    """Draw the initial live points uniformly from the unit hypercube.

    Returns
    -------
    An array of shape `(num_live, ndim)`.
    """
    return jax.random.uniform(rng_key, (num_live, ndim))


def stream(
    rng_key: PRNGKey,
    algorithm: SamplingAlgorithm,
    initial_state: Optional[NSState] = None,
    initial_position: ArrayLikeTree = None,
) -> Iterator[NSInfo]:
    """Iterate over the nested sampling run, one `NSInfo` per iteration.

    The iterator is infinite. Each `next` call runs exactly one (jitted)
    iteration, so no work is done ahead of the consumer. The run ends when
    the consumer stops advancing the iterator, or calls its `close` method.
    The live population is held by the iterator and never exposed.

    Parameters
    ----------
    rng_key
        The random state used by JAX's random numbers generator.
    algorithm
        The nested sampling algorithm.
    initial_state
        The initial state of the sampler.
    initial_position
        The positions of the initial live points. Used when the initial
        state is not provided.

    """
    if initial_state is None and initial_position is None:
        raise ValueError(
            "Either `initial_state` or `initial_position` must be provided."
        )
    if initial_state is not None and initial_position is not None:
        raise ValueError(
            "Only one of `initial_state` or `initial_position` must be provided."
        )

    if initial_state is None:
        rng_key, init_key = jax.random.split(rng_key)
        initial_state = algorithm.init(initial_position, init_key)

    return _iterate(rng_key, jax.jit(algorithm.step), initial_state)


def _iterate(rng_key, step_fn, state):
    logger.debug(
        "Starting nested sampling with %d live points", state.loglikelihood.shape[0]
    )
    while True:
        rng_key, step_key = jax.random.split(rng_key)
        state, info = step_fn(step_key, state)
        yield info


def collect(results: Iterator[NSInfo], num_steps: int) -> NSInfo:
    """Consume `num_steps` records from a result stream.

    Parameters
    ----------
    results
        An iterator of `NSInfo`, typically the output of `stream`. It is left
        open, so that more iterations can be requested later.
    num_steps
        Number of iterations to consume.

    Returns
    -------
    A single `NSInfo` whose fields are stacked along a leading iteration
    axis. The last entry holds the final evidence and information.

    """
    if num_steps < 1:
        raise ValueError("At least one iteration must be collected.")
    infos = list(itertools.islice(results, num_steps))
    if not infos:
        raise ValueError("The result stream is exhausted.")
    info = jax.tree.map(lambda *x: jnp.stack(x), *infos)
    log_summary(info)
    return info


def posterior_weights(info: NSInfo) -> Array:
    """Posterior weight `exp(logWt - logZ)` of every dead point.

    The final `logZ` of the run is the normalisation, so the weights of a
    run sum to one.
    """
    return jnp.exp(info.logWt - info.logZ[-1])


def weighted_moments(
    info: NSInfo, transform_fn: Optional[Callable] = None
) -> tuple[ArrayTree, ArrayTree]:
    """Posterior mean and standard deviation of the dead points.

    Parameters
    ----------
    info
        Stacked records of a run, e.g. the output of `collect`.
    transform_fn
        Maps the unit-cube coordinates of a single point to the quantities
        to summarise (typically the physical parameters). Defaults to the
        coordinates themselves.

    Returns
    -------
    The weighted mean and standard deviation, with the structure of
    `transform_fn`'s output.

    """
    weights = posterior_weights(info)
    samples = info.particles
    if transform_fn is not None:
        samples = jax.vmap(transform_fn)(samples)

    def mean(x):
        w = weights.reshape((-1,) + (1,) * (jnp.ndim(x) - 1))
        return jnp.sum(w * x, axis=0)

    first = jax.tree.map(mean, samples)
    second = jax.tree.map(lambda x: mean(x**2), samples)
    std = jax.tree.map(
        lambda m, mm: jnp.sqrt(jnp.maximum(mm - m**2, 0.0)), first, second
    )
    return first, std


def evidence_error(info: NSInfo) -> Array:
    """Standard error of the final `logZ`, `sqrt(H / n)` after `n` iterations."""
    return jnp.sqrt(info.H[-1] / info.H.shape[0])


def log_summary(info: NSInfo) -> None:
    """Log the number of iterations, the evidence and the information."""
    num_iterations = info.logZ.shape[0]
    logZ = float(info.logZ[-1])
    H = float(info.H[-1])
    logger.info("# iterates = %d", num_iterations)
    logger.info(
        "Evidence: ln(Z) = %.3f +- %.5f", logZ, float(evidence_error(info))
    )
    logger.info("Information: H = %.5f nats = %.5f bits", H, H / math.log(2.0))
