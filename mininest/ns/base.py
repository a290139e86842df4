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
"""Base components of the nested sampler.

This module provides the point contract (`PointState`, `LogLikelihoodFn`,
`ExploreFn`), the sampler state and per-iteration record (`NSState`,
`NSInfo`) and the generic kernel that performs one iteration of Skilling's
nested sampling.

Each iteration removes the live point with the lowest likelihood, folds its
contribution into the running evidence `logZ` and information `H`, replaces
it by a copy of another live point evolved above the likelihood of the one
just removed, and shrinks the enclosed prior mass by a factor `exp(-1/N)`.
The kernel is domain-agnostic: the problem enters only through the
log-likelihood function and the exploration kernel.
"""
from typing import Callable, NamedTuple

import jax
import jax.numpy as jnp
from typing_extensions import Protocol

from mininest.types import Array, ArrayLikeTree, ArrayTree, PRNGKey
from mininest.util import log1mexp, logsumexp

__all__ = [
    "PointState",
    "NSState",
    "NSInfo",
    "init",
    "build_kernel",
    "take_point",
    "select_worst",
    "select_survivor",
    "update_evidence",
]


class PointState(NamedTuple):
    """A single candidate point.

    position
        PyTree of internal coordinates, uniformly distributed on `[0, 1)`
        under the prior. Physical coordinates are derived from it by the
        problem's own transformation.
    loglikelihood
        The log-likelihood at `position`. Always recomputed together with
        the position, never carried over from another position.

    """

    position: ArrayTree
    loglikelihood: float


class LogLikelihoodFn(Protocol):
    """Log-likelihood of a single point, given its internal coordinates."""

    def __call__(self, position: ArrayLikeTree) -> float:
        ...


class ExploreFn(Protocol):
    """Evolve a point under a hard likelihood constraint.

    The returned point is a new state obtained by exploring from `state`
    with the constraint `loglikelihood > loglikelihood_0`. Exploration runs
    for a pre-judged amount of work, so the constraint is a goal rather than
    a guarantee: if no move is ever accepted the input point is returned.

    """

    def __call__(
        self, rng_key: PRNGKey, state: PointState, loglikelihood_0: float
    ) -> tuple[PointState, NamedTuple]:
        ...


class NSState(NamedTuple):
    """State of the nested sampler.

    particles
        PyTree of the live points' positions. Each leaf has a leading
        dimension equal to the number of live points `N`.
    loglikelihood
        Log-likelihood of each live point, shape `(N,)`.
    logwidth
        Log of the width in prior mass of the next shell to be removed.
    logZ
        Accumulated log-evidence.
    H
        Accumulated information, in nats.

    """

    particles: ArrayTree
    loglikelihood: Array
    logwidth: Array
    logZ: Array
    H: Array


class NSInfo(NamedTuple):
    """Record emitted by each iteration of the nested sampler.

    H
        Information after this iteration.
    logZ
        Log-evidence after this iteration.
    logWt
        Log-weight of the dead point, `logwidth + loglikelihood`.
    particles
        Position of the dead point, the posterior sample.
    loglikelihood
        Log-likelihood of the dead point.
    dead_idx
        Slot of the dead point in the live population.
    start_idx
        Slot of the live point that was copied and explored to replace it.
        Equal to `dead_idx` when there is a single live point.
    explore_info
        Information returned by the exploration kernel.

    """

    H: Array
    logZ: Array
    logWt: Array
    particles: ArrayTree
    loglikelihood: Array
    dead_idx: Array
    start_idx: Array
    explore_info: NamedTuple


def init(particles: ArrayLikeTree, loglikelihood_fn: LogLikelihoodFn) -> NSState:
    """Create the sampler state from points drawn from the prior.

    Parameters
    ----------
    particles
        Positions of the initial live points. The leading dimension of each
        leaf is the number of live points and must be at least one.
    loglikelihood_fn
        Log-likelihood of a single point.

    Returns
    -------
    The initial `NSState`: zero information, `logZ = -inf` and the width of
    the outermost shell `log(1 - exp(-1/N))`.

    """
    leaves = jax.tree_util.tree_leaves(particles)
    if not leaves or jnp.ndim(leaves[0]) == 0 or len(leaves[0]) == 0:
        raise ValueError("Nested sampling needs at least one live point.")
    num_live = len(leaves[0])

    loglikelihood = jax.vmap(loglikelihood_fn)(particles)
    dtype = loglikelihood.dtype
    logwidth = log1mexp(jnp.asarray(-1.0 / num_live, dtype=dtype))
    logZ = jnp.array(-jnp.inf, dtype=dtype)
    H = jnp.array(0.0, dtype=dtype)
    return NSState(particles, loglikelihood, logwidth, logZ, H)


def take_point(particles: ArrayTree, idx: Array) -> ArrayTree:
    """Copy the position stored at slot `idx` out of the live population."""
    return jax.tree.map(lambda x: x[idx], particles)


def select_worst(loglikelihood: Array) -> Array:
    """Slot of the lowest log-likelihood, the first one in case of ties."""
    return jnp.argmin(loglikelihood).astype(jnp.int32)


def select_survivor(rng_key: PRNGKey, dead_idx: Array, num_live: int) -> Array:
    """Draw, uniformly, the slot of a live point other than `dead_idx`.

    Indices are drawn until one differs from `dead_idx`. With a single live
    point there is no other point to copy, and the dead slot itself is
    returned so that the point is evolved in place.

    """
    if num_live == 1:
        return dead_idx

    def cond_fn(carry):
        _, idx = carry
        return idx == dead_idx

    def body_fn(carry):
        key, _ = carry
        key, subkey = jax.random.split(key)
        return key, jax.random.randint(subkey, (), 0, num_live, dtype=jnp.int32)

    _, start_idx = jax.lax.while_loop(cond_fn, body_fn, (rng_key, dead_idx))
    return start_idx


def update_evidence(
    logZ: Array, H: Array, logWt: Array, loglikelihood: Array
) -> tuple[Array, Array]:
    """Fold one dead point into the evidence and information.

    Parameters
    ----------
    logZ
        Log-evidence accumulated so far.
    H
        Information accumulated so far.
    logWt
        Log-weight of the dead point.
    loglikelihood
        Log-likelihood of the dead point.

    Returns
    -------
    The updated `(logZ, H)`. The update of `H` uses the previous value of
    `logZ`; before the first point (`logZ = -inf`) the previous information
    has no weight.

    """
    logZ_new = logsumexp(logZ, logWt)
    previous = jnp.where(
        jnp.isneginf(logZ), 0.0, jnp.exp(logZ - logZ_new) * (H + logZ)
    )
    H = jnp.exp(logWt - logZ_new) * loglikelihood + previous - logZ_new
    return logZ_new, H


def build_kernel(explore_fn: ExploreFn) -> Callable:
    """Build the nested sampling kernel.

    One call of the kernel:

    1. finds the live point with the lowest log-likelihood;
    2. computes its log-weight `logwidth + loglikelihood` and folds it into
       the evidence and information;
    3. copies the position of a different, uniformly chosen, live point (or
       of the same point when `N = 1`) and evolves it with `explore_fn`
       under the constraint `loglikelihood > loglikelihood_dead`;
    4. writes the result in the dead point's slot;
    5. shrinks the log-width by `1/N`.

    Parameters
    ----------
    explore_fn
        Kernel `(rng_key, point, loglikelihood_0) -> (point, info)` that
        evolves a copied point under the likelihood constraint.

    Returns
    -------
    A kernel `(rng_key, state) -> (new_state, info)`.

    """

    def kernel(rng_key: PRNGKey, state: NSState) -> tuple[NSState, NSInfo]:
        num_live = state.loglikelihood.shape[0]

        dead_idx = select_worst(state.loglikelihood)
        dead_loglikelihood = state.loglikelihood[dead_idx]
        dead_particles = take_point(state.particles, dead_idx)

        logWt = state.logwidth + dead_loglikelihood
        logZ, H = update_evidence(state.logZ, state.H, logWt, dead_loglikelihood)

        # The constraint is the dead point's likelihood, fixed before replacement
        select_key, explore_key = jax.random.split(rng_key)
        start_idx = select_survivor(select_key, dead_idx, num_live)
        start = PointState(
            take_point(state.particles, start_idx), state.loglikelihood[start_idx]
        )
        new_point, explore_info = explore_fn(explore_key, start, dead_loglikelihood)

        particles = jax.tree.map(
            lambda p, n: p.at[dead_idx].set(n), state.particles, new_point.position
        )
        loglikelihood = state.loglikelihood.at[dead_idx].set(new_point.loglikelihood)
        logwidth = state.logwidth - 1.0 / num_live

        new_state = NSState(particles, loglikelihood, logwidth, logZ, H)
        info = NSInfo(
            H,
            logZ,
            logWt,
            dead_particles,
            dead_loglikelihood,
            dead_idx,
            start_idx,
            explore_info,
        )
        return new_state, info

    return kernel
