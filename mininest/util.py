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
"""Utility functions for mininest."""
from typing import Callable, Union

import jax.numpy as jnp
from jax.flatten_util import ravel_pytree
from jax.random import split, uniform
from jax.tree_util import tree_map

from mininest.base import SamplingAlgorithm
from mininest.progress_bar import gen_scan_fn
from mininest.types import Array, ArrayLike, ArrayLikeTree, ArrayTree, PRNGKey

__all__ = [
    "logsumexp",
    "log1mexp",
    "generate_uniform_noise",
    "wrap_unit_cube",
    "run_inference_algorithm",
]


def logsumexp(x: ArrayLike, y: ArrayLike) -> Array:
    """Add two log-probabilities, `log(exp(x) + exp(y))`.

    The larger of the two arguments is factored out so that the exponential
    never overflows: for `x > y` this is `x + log(1 + exp(y - x))`, and the
    symmetric form otherwise. The sum of two vanishing probabilities
    (`x = y = -inf`) is `-inf`.

    Parameters
    ----------
    x, y
        Log-probabilities, scalars or arrays of broadcastable shapes.

    Returns
    -------
    The log of the summed probabilities.

    """
    x, y = jnp.asarray(x), jnp.asarray(y)
    larger = jnp.maximum(x, y)
    total = larger + jnp.log1p(jnp.exp(-jnp.abs(x - y)))
    return jnp.where(jnp.isneginf(larger), larger, total)


def log1mexp(x: ArrayLike) -> Array:
    """Computes log(1 - exp(x)) in a numerically stable way.

    Uses the algorithm of Mächler (2012) [1]_, switching between `expm1` and
    `log1p` at `x = -log(2)`. Values of `x` must be non-positive.

    References
    ----------
    .. [1] Mächler, M. (2012). Accurately computing log(1-exp(-|a|)).
           CRAN R project, package Rmpfr, vignette log1mexp-note.pdf.

    """
    x = jnp.asarray(x)
    return jnp.where(
        x > -0.6931472,  # approx -log(2)
        jnp.log(-jnp.expm1(x)),
        jnp.log1p(-jnp.exp(x)),
    )


def generate_uniform_noise(
    rng_key: PRNGKey,
    position: ArrayLikeTree,
    scale: Union[float, Array] = 1.0,
) -> ArrayTree:
    """Generate U(-scale, scale) noise with output structure that match a given PyTree.

    Parameters
    ----------
    rng_key:
        The pseudo-random number generator key used to generate random numbers.
    position:
        PyTree that the structure the output should to match.
    scale:
        Half-width of the uniform distribution.

    Returns
    -------
    Uniform noise in `[-scale, scale)` that match the structure of position.
    """
    p, unravel_fn = ravel_pytree(position)
    sample = uniform(rng_key, shape=p.shape, dtype=p.dtype, minval=-1.0, maxval=1.0)
    return unravel_fn((scale * sample).astype(p.dtype))


def wrap_unit_cube(position: ArrayLikeTree) -> ArrayTree:
    """Map every coordinate of a PyTree back into `[0, 1)` periodically.

    Values below 0 or at/above 1 wrap around the torus, they are neither
    clamped nor reflected.
    """

    def wrap(x):
        x = x - jnp.floor(x)
        # tiny negative inputs round up to exactly 1.0
        return jnp.where(x >= 1.0, jnp.zeros_like(x), x)

    return tree_map(wrap, position)


def run_inference_algorithm(
    rng_key: PRNGKey,
    inference_algorithm: SamplingAlgorithm,
    num_steps: int,
    initial_state: ArrayLikeTree = None,
    initial_position: ArrayLikeTree = None,
    progress_bar: bool = False,
    transform: Callable = lambda state, info: info,
) -> tuple:
    """Run a sampling algorithm for a fixed number of steps inside `lax.scan`.

    This is the bounded counterpart of `mininest.ns.utils.stream`: the number
    of nested sampling iterations is decided up front and the whole loop is
    compiled once.

    Parameters
    ----------
    rng_key
        The random state used by JAX's random numbers generator.
    inference_algorithm
        The sampling algorithm, e.g. the output of `mininest.nested_sampling`.
    num_steps
        Number of iterations.
    initial_state
        The initial state of the algorithm.
    initial_position
        The initial positions of the live points. Used when the initial state
        is not provided.
    progress_bar
        Whether to display a progress bar.
    transform
        A transformation of the trace of states and infos to be returned.
        By default only the per-iteration infos (the result records) are kept.

    Returns
    -------
        1. The final state.
        2. The history of `transform(state, info)`, stacked along a leading axis.
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
        rng_key, init_key = split(rng_key, 2)
        initial_state = inference_algorithm.init(initial_position, init_key)

    keys = split(rng_key, num_steps)

    def one_step(state, xs):
        _, rng_key = xs
        state, info = inference_algorithm.step(rng_key, state)
        return state, transform(state, info)

    scan_fn = gen_scan_fn(num_steps, progress_bar)

    xs = jnp.arange(num_steps), keys
    final_state, history = scan_fn(one_step, initial_state, xs)

    return final_state, history
