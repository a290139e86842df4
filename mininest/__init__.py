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
import dataclasses
from typing import Callable

from mininest._version import __version__

from .base import SamplingAlgorithm
from .ns import constrained_random_walk
from .ns import nested_sampling as _nested_sampling
from .util import logsumexp, run_inference_algorithm

"""
The top-level API exposes both the high level factory, which returns a
`SamplingAlgorithm`, and the low level `init` and `build_kernel` components
it is assembled from.
"""


@dataclasses.dataclass
class GenerateSamplingAPI:
    differentiable: Callable
    init: Callable
    build_kernel: Callable

    def __call__(self, *args, **kwargs) -> SamplingAlgorithm:
        return self.differentiable(*args, **kwargs)


def generate_top_level_api_from(module):
    return GenerateSamplingAPI(
        module.as_top_level_api, module.init, module.build_kernel
    )


nested_sampling = generate_top_level_api_from(_nested_sampling)

__all__ = [
    "__version__",
    "nested_sampling",
    "constrained_random_walk",
    "logsumexp",
    "run_inference_algorithm",
]
