from pkg_a.core import compute_value

compute_value(99)
