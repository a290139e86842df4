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
"""Nested sampling with a constrained random walk.

This is the classic algorithm of Skilling (2006) as presented by Sivia &
Skilling: one live point is replaced at each iteration, and the replacement
is a copy of another live point evolved by a constrained random walk on the
unit hypercube (see `mininest.ns.constrained_random_walk`). Any other
exploration kernel honouring the `ExploreFn` contract can be substituted.

Examples
--------
The sampler runs for as long as the caller keeps asking for iterations:

.. code::

    algo = mininest.nested_sampling(loglikelihood_fn)
    particles = mininest.ns.utils.uniform_prior(init_key, num_live=100, ndim=2)
    results = mininest.ns.utils.stream(rng_key, algo, initial_position=particles)
    info = mininest.ns.utils.collect(results, 1000)

"""
from typing import Callable, Optional

from mininest.base import SamplingAlgorithm
from mininest.ns import constrained_random_walk
from mininest.ns.base import ExploreFn, NSState
from mininest.ns.base import build_kernel as build_base_kernel
from mininest.ns.base import init
from mininest.types import ArrayLikeTree, PRNGKey

__all__ = ["init", "build_kernel", "as_top_level_api"]


def build_kernel(
    loglikelihood_fn: Callable,
    num_steps: int = 20,
    initial_step_size: float = 0.1,
    explore_fn: Optional[ExploreFn] = None,
) -> Callable:
    """Build the nested sampling kernel.

    Parameters
    ----------
    loglikelihood_fn
        Log-likelihood of a single point, as a function of its unit-cube
        coordinates.
    num_steps
        Number of constrained random-walk trials used to evolve each
        replacement point.
    initial_step_size
        Initial step size of the constrained random walk.
    explore_fn
        Custom exploration kernel. When given, `num_steps` and
        `initial_step_size` are ignored.

    Returns
    -------
    A kernel `(rng_key, state) -> (new_state, info)`.

    """
    if explore_fn is None:
        explore_fn = constrained_random_walk.build_kernel(
            loglikelihood_fn, num_steps, initial_step_size
        )
    return build_base_kernel(explore_fn)


def as_top_level_api(
    loglikelihood_fn: Callable,
    num_steps: int = 20,
    initial_step_size: float = 0.1,
    explore_fn: Optional[ExploreFn] = None,
) -> SamplingAlgorithm:
    """Implements the user interface of the nested sampler.

    Parameters
    ----------
    loglikelihood_fn
        Log-likelihood of a single point, as a function of its unit-cube
        coordinates.
    num_steps
        Number of constrained random-walk trials per replacement.
    initial_step_size
        Initial step size of the constrained random walk.
    explore_fn
        Custom exploration kernel replacing the constrained random walk.

    Returns
    -------
    A ``SamplingAlgorithm`` whose state is an `NSState` and whose step
    returns one `NSInfo` record per iteration.

    """
    kernel = build_kernel(loglikelihood_fn, num_steps, initial_step_size, explore_fn)

    def init_fn(position: ArrayLikeTree, rng_key=None) -> NSState:
        del rng_key
        return init(position, loglikelihood_fn)

    def step_fn(rng_key: PRNGKey, state: NSState):
        return kernel(rng_key, state)

    return SamplingAlgorithm(init_fn, step_fn)
