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
"""Constrained random walk on the unit hypercube.

Evolves a copied live point under a hard likelihood constraint with a fixed,
pre-judged number of random-walk trials. Every coordinate is moved by a
uniform offset in `[-step, step]` and wrapped periodically into `[0, 1)`.
A trial is accepted if and only if its log-likelihood is strictly larger
than the constraint: inside the constraint every position is equally good.

The step size starts afresh at each call and is tuned along the walk so that
the acceptance ratio settles around one half: it grows by `exp(1/accepted)`
while acceptances dominate and shrinks by `exp(1/rejected)` while rejections
do.
"""
from typing import Callable, NamedTuple

import jax
import jax.numpy as jnp

from mininest.ns.base import ExploreFn, PointState
from mininest.types import Array, ArrayLikeTree, PRNGKey
from mininest.util import generate_uniform_noise, wrap_unit_cube

__all__ = ["CRWInfo", "init", "adapt_step_size", "build_kernel"]


class CRWInfo(NamedTuple):
    """Diagnostics of one constrained walk.

    num_accepted
        Number of trials that satisfied the constraint.
    num_rejected
        Number of trials that did not.
    step_size
        Step size at the end of the walk.

    """

    num_accepted: Array
    num_rejected: Array
    step_size: Array


def init(position: ArrayLikeTree, loglikelihood_fn: Callable) -> PointState:
    return PointState(position, loglikelihood_fn(position))


def adapt_step_size(step_size: Array, num_accepted: Array, num_rejected: Array):
    """Refine the step size so that the acceptance ratio converges around 50%."""
    grown = step_size * jnp.exp(1.0 / jnp.maximum(num_accepted, 1))
    shrunk = step_size / jnp.exp(1.0 / jnp.maximum(num_rejected, 1))
    new_step_size = jnp.where(
        num_accepted > num_rejected,
        grown,
        jnp.where(num_accepted < num_rejected, shrunk, step_size),
    )
    return new_step_size.astype(step_size.dtype)


def build_kernel(
    loglikelihood_fn: Callable,
    num_steps: int = 20,
    initial_step_size: float = 0.1,
) -> ExploreFn:
    """Build the constrained random walk kernel.

    Parameters
    ----------
    loglikelihood_fn
        Log-likelihood of a single point, as a function of its unit-cube
        coordinates.
    num_steps
        Number of random-walk trials per call.
    initial_step_size
        Step size at the start of each call, as a fraction of the unit cube.

    Returns
    -------
    A kernel `(rng_key, state, loglikelihood_0) -> (new_state, info)`. If
    every trial is rejected the input state is returned unchanged, even
    though its likelihood does not exceed `loglikelihood_0` when it is the
    dead point itself.

    """
    if num_steps < 1:
        raise ValueError("The constrained walk needs at least one step.")
    if initial_step_size <= 0:
        raise ValueError("The initial step size must be positive.")

    def kernel(
        rng_key: PRNGKey, state: PointState, loglikelihood_0: float
    ) -> tuple[PointState, CRWInfo]:
        loglikelihood = jnp.asarray(state.loglikelihood)
        state = PointState(state.position, loglikelihood)

        def body_fn(_, carry):
            point, step_size, num_accepted, num_rejected, key = carry
            key, proposal_key = jax.random.split(key)

            noise = generate_uniform_noise(proposal_key, point.position, step_size)
            position = wrap_unit_cube(jax.tree.map(jnp.add, point.position, noise))
            trial = PointState(
                position,
                jnp.asarray(loglikelihood_fn(position), dtype=loglikelihood.dtype),
            )

            is_accepted = trial.loglikelihood > loglikelihood_0
            point = jax.tree.map(
                lambda new, old: jnp.where(is_accepted, new, old), trial, point
            )
            num_accepted = num_accepted + is_accepted
            num_rejected = num_rejected + ~is_accepted
            step_size = adapt_step_size(step_size, num_accepted, num_rejected)
            return point, step_size, num_accepted, num_rejected, key

        carry = (
            state,
            jnp.asarray(initial_step_size, dtype=loglikelihood.dtype),
            jnp.array(0, dtype=jnp.int32),
            jnp.array(0, dtype=jnp.int32),
            rng_key,
        )
        point, step_size, num_accepted, num_rejected, _ = jax.lax.fori_loop(
            0, num_steps, body_fn, carry
        )
        return point, CRWInfo(num_accepted, num_rejected, step_size)

    return kernel
