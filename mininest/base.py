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
from typing import NamedTuple, Optional

from typing_extensions import Protocol

from .types import ArrayLikeTree, PRNGKey

Position = ArrayLikeTree
State = NamedTuple
Info = NamedTuple


class InitFn(Protocol):
    """A `Callable` used to initialize the sampler state.

    The nested sampler does not operate on the raw live positions but on a
    state that also caches their log-likelihoods and the running evidence
    estimate. `InitFn` builds this state from the positions of the initial
    live points, drawn from the prior.

    """

    def __call__(self, position: Position, rng_key: Optional[PRNGKey]) -> State:
        """Initialize the algorithm's state.

        Parameters
        ----------
        position
           The positions of the initial live points.

        Returns
        -------
        The sampler state that corresponds to the positions.

        """


class UpdateFn(Protocol):
    """A transition kernel used as the `step` of a `SamplingAlgorithm`.

    Kernels are pure functions. They take a random state `rng_key` and the
    current sampler state, and return a new state together with the record
    of what happened during the transition.

    """

    def __call__(self, rng_key: PRNGKey, state: State) -> tuple[State, Info]:
        """Update the current state using the sampling algorithm.

        Parameters
        ----------
        rng_key:
            The random state used by JAX's random numbers generator.
        state:
            The current sampler state.

        Returns
        -------
        A new state, as well as a NamedTuple that records the transition
        (for nested sampling: the dead point and the evidence so far).

        """


class SamplingAlgorithm(NamedTuple):
    """A pair of functions that represents a sampling algorithm.

    init:
        A pure function which, called with the initial positions, returns
        the initial state of the sampler.

    step:
        A pure function that takes a rng key and a state and returns a new
        state and some information about the transition.

    """

    init: InitFn
    step: UpdateFn
