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
"""Nested sampling in mininest.

Nested sampling (Skilling, 2006) estimates the Bayesian evidence (marginal
likelihood) by following a population of live points up the likelihood
while the prior mass they enclose shrinks geometrically. The points removed
along the way are weighted posterior samples.

Available modules:
------------------
- `base`: the point contract, the sampler state and record, and the
          generic nested sampling kernel.
- `constrained_random_walk`: the adaptive-step random walk used to evolve
          replacement points under the likelihood constraint.
- `nested_sampling`: the nested sampler assembled from the two above.
- `utils`: streaming the run, collecting it and summarising the results.

"""
from . import base, constrained_random_walk, nested_sampling, utils

__all__ = [
    "base",
    "constrained_random_walk",
    "nested_sampling",
    "utils",
]
