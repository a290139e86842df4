"""The "lighthouse" problem of Sivia & Skilling (2006).

A lighthouse at unknown position (x, y), somewhere off a straight coastline,
emits flashes in uniformly random directions. The flashes are recorded at
positions D[k] along the coast. We want the position of the lighthouse:

                u=0                                 u=1
                 -------------------------------------
            y=2 |:::::::::::::::::::::::::::::::::::::| v=1
                |::::::::::::::::::::::LIGHT::::::::::|
           north|::::::::::::::::::::::HOUSE::::::::::|
                |:::::::::::::::::::::::::::::::::::::|
                |:::::::::::::::::::::::::::::::::::::|
            y=0 |:::::::::::::::::::::::::::::::::::::| v=0
   --*--------------*----*--------*-**--**--*-*-------------*--------
               x=-2          coastline -.east      x=2

The prior is flat on (u, v) in the unit square, mapped to x = 4u - 2 and
y = 2v. Each flash position follows a Cauchy distribution,
L(x, y) = PRODUCT[k] (y / pi) / ((D[k] - x)^2 + y^2).
"""
import logging

import jax
import jax.numpy as jnp

import mininest
from mininest.ns.utils import collect, stream, uniform_prior, weighted_moments

logging.basicConfig(level=logging.INFO, format="%(message)s")

# jax.config.update("jax_enable_x64", True)

FLASHES = jnp.array(
    [
        4.73, 0.45, -1.73, 1.09, 2.19, 0.12, 1.31, 1.00, 1.32, 1.07,
        0.86, -0.49, -2.59, 1.73, 2.11, 1.61, 4.98, 1.71, 2.23, -57.20,
        0.96, 1.25, -1.56, 2.45, 1.19, 2.17, -10.66, 1.91, -4.16, 1.92,
        0.10, 1.98, -2.51, 5.55, -0.47, 1.91, 0.95, -0.78, -0.84, 1.72,
        -0.01, 1.48, 2.70, 1.21, 4.41, -4.79, 1.33, 0.81, 0.20, 1.58,
        1.29, 16.19, 2.75, -2.38, -1.79, 6.50, -18.53, 0.72, 0.94, 3.64,
        1.94, -0.11, 1.57, 0.57,
    ]
)  # fmt: skip


def to_physical(u):
    """Map the unit square to the easterly and northerly positions."""
    return {"x": 4.0 * u[0] - 2.0, "y": 2.0 * u[1]}


def loglikelihood_fn(u):
    position = to_physical(u)
    x, y = position["x"], position["y"]
    return jnp.sum(jnp.log((y / jnp.pi) / ((FLASHES - x) ** 2 + y**2)))


############################################
# Nested Sampling algorithm definition
############################################

# n_live is the number of live points maintained throughout the run
n_live = 100
# num_steps is the number of constrained random-walk trials used to evolve
# every replacement point
num_steps = 20
# n_iterations is decided up front: the sampler never stops on its own
n_iterations = 1000

algo = mininest.nested_sampling(loglikelihood_fn, num_steps=num_steps)

rng_key = jax.random.key(0)
rng_key, init_key, sample_key = jax.random.split(rng_key, 3)
initial_particles = uniform_prior(init_key, n_live, 2)

# The run is an infinite stream of dead points. `collect` takes the number of
# iterations we asked for and logs the evidence and the information.
results = stream(sample_key, algo, initial_position=initial_particles)
dead = collect(results, n_iterations)
results.close()

mean, std = weighted_moments(dead, to_physical)
print(f"mean(x) = {mean['x']:.5f}, stddev(x) = {std['x']:.5f}")
print(f"mean(y) = {mean['y']:.5f}, stddev(y) = {std['y']:.5f}")
