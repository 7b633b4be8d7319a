"""
Tridiagonal solver for implicit vertical diffusion.

Thomas algorithm with a forward elimination sweep from the bottom cell up and
a back substitution from the surface down, both written as `jax.lax.scan`.
"""

import jax
import jax.numpy as jnp


@jax.jit
def solve_tridiagonal(
    lower: jnp.ndarray,
    diag: jnp.ndarray,
    upper: jnp.ndarray,
    rhs: jnp.ndarray
) -> jnp.ndarray:
    """
    Solve a single tridiagonal system A x = rhs.

    Row i reads lower[i] x[i-1] + diag[i] x[i] + upper[i] x[i+1] = rhs[i];
    lower[0] and upper[-1] are ignored.

    Args:
        lower: Sub-diagonal [n]
        diag: Diagonal [n]
        upper: Super-diagonal [n]
        rhs: Right-hand side [n]

    Returns:
        Solution [n]
    """
    cp_0 = upper[0] / diag[0]
    dp_0 = rhs[0] / diag[0]

    def forward_step(carry, inputs):
        cp_prev, dp_prev = carry
        a_i, b_i, c_i, d_i = inputs

        denom_i = b_i - a_i * cp_prev
        cp_i = c_i / denom_i
        dp_i = (d_i - a_i * dp_prev) / denom_i

        return (cp_i, dp_i), (cp_i, dp_i)

    _, (cp_rest, dp_rest) = jax.lax.scan(
        forward_step,
        (cp_0, dp_0),
        (lower[1:], diag[1:], upper[1:], rhs[1:])
    )
    cp = jnp.concatenate([cp_0[None], cp_rest])
    dp = jnp.concatenate([dp_0[None], dp_rest])

    x_last = dp[-1]

    def backward_step(x_next, inputs):
        cp_i, dp_i = inputs
        x_i = dp_i - cp_i * x_next
        return x_i, x_i

    _, x_rest = jax.lax.scan(backward_step, x_last, (cp[:-1][::-1], dp[:-1][::-1]))

    return jnp.concatenate([x_rest[::-1], x_last[None]])


def tridiagonal_matvec(lower, diag, upper, x):
    """Product A x for the same storage convention as solve_tridiagonal."""
    y = diag * x
    y = y.at[1:].add(lower[1:] * x[:-1])
    y = y.at[:-1].add(upper[:-1] * x[1:])
    return y
