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
"""Progress bar for nested sampling runs compiled with `lax.scan`.

The bar lives on the host and is advanced from inside the compiled loop with
`io_callback`, following Jeremie Coullon's blog post :cite:p:`progress_bar`.
"""
from threading import Lock

import jax
import jax.numpy as jnp
import numpy as np
from fastprogress.fastprogress import progress_bar
from jax import lax
from jax.experimental import io_callback

__all__ = ["progress_bar_scan", "gen_scan_fn"]

_BAR_ID = jax.ShapeDtypeStruct((), jnp.int32)


def progress_bar_scan(num_samples, print_rate=None):
    "Progress bar for a JAX scan"
    bars = {}
    next_bar_id = 0
    lock = Lock()

    if print_rate is None:
        print_rate = max(num_samples // 20, 1)

    def _open_bar():
        nonlocal next_bar_id
        with lock:
            bar_id = next_bar_id
            next_bar_id += 1
        bars[bar_id] = progress_bar(range(num_samples))
        bars[bar_id].update(0)
        return bar_id

    def _update_bar(iter_num, bar_id):
        bar_id = int(bar_id)
        if iter_num == 0:
            bar_id = _open_bar()
        bars[bar_id].update_bar(int(iter_num) + 1)
        return np.int32(bar_id)

    def _close_bar(iter_num, bar_id):
        bars.pop(int(bar_id)).on_iter_end()

    def _update_progress_bar(iter_num, bar_id):
        bar_id = lax.cond(
            (iter_num % print_rate == 0) | (iter_num == num_samples - 1),
            lambda _: io_callback(_update_bar, _BAR_ID, iter_num, bar_id),
            lambda _: bar_id,
            operand=None,
        )
        lax.cond(
            iter_num == num_samples - 1,
            lambda _: io_callback(_close_bar, None, iter_num, bar_id),
            lambda _: None,
            operand=None,
        )
        return bar_id

    def _progress_bar_scan(func):
        """Decorator that adds a progress bar to `body_fun` used in `lax.scan`.

        The scanned-over `xs` must be `jnp.arange(num_samples)`, or a tuple
        whose first element is, so that the iteration number is known.
        """

        def wrapper_progress_bar(carry, x):
            if type(x) is tuple:
                iter_num, *_ = x
            else:
                iter_num = x
            subcarry, bar_id = carry
            bar_id = _update_progress_bar(iter_num, bar_id)
            subcarry, y = func(subcarry, x)
            return (subcarry, bar_id), y

        return wrapper_progress_bar

    return _progress_bar_scan


def gen_scan_fn(num_samples, progress_bar, print_rate=None):
    """Return `lax.scan`, wrapped with a progress bar when requested."""
    if not progress_bar:
        return lax.scan

    def scan_wrap(f, init, *args, **kwargs):
        func = progress_bar_scan(num_samples, print_rate)(f)
        carry = (init, jnp.array(-1, dtype=jnp.int32))
        (last_state, _), output = lax.scan(func, carry, *args, **kwargs)
        return last_state, output

    return scan_wrap
