import logging

from .optimal_tf_gauss_newton import GaussNewtonParameters
from .pair_weights import PairWeights
from .robust_kernels import RobustKernel
from .transformation import Transformation

logger = logging.getLogger(__name__)

_params: None | dict = None  # uninitialized


parameter_definitions = {
    "linearization_point": "double_list",  # [x, y, z, yaw, pitch, roll], angles in degrees
    "robust_kernel": "string",  # none, gemanmcclure, cauchy, huber
    "robust_kernel_param": "float",
    "weight_pt2pt": "float",
    "weight_pt2ln": "float",
    "weight_pt2pl": "float",
    "weight_pl2pl": "float",
    "weight_ln2ln": "float",
    "max_inner_loop_iterations": "int",
    "max_cost": "float",
    "min_delta": "float",
    "verbose": "boolean",
}


def _coerce(name: str, value):
    typeinfo = parameter_definitions[name]
    if typeinfo == "float":
        return float(value)
    elif typeinfo == "int":
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"{value} is not an integer")
        return int(value)
    elif typeinfo == "string":
        return str(value)
    elif typeinfo == "double_list":
        return [float(v) for v in value]
    elif typeinfo == "boolean":
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)
    else:
        raise Exception(f"Parameter type '{typeinfo}' not yet implemented!")


def init_from_dict(values: dict):
    """
    Loads parameters from a flat dictionary. Unknown names are rejected, values are
    converted to the types declared in `parameter_definitions`.
    """
    global _params
    loaded = {}
    for name, value in values.items():
        if name not in parameter_definitions:
            raise Exception(f"Unknown parameter '{name}'!")
        try:
            loaded[name] = _coerce(name, value)
        except (TypeError, ValueError) as e:
            raise Exception(f"Could not read parameter '{name}' with value {value!r}") from e
        logger.info(f"Loaded parameter '{name}': {loaded[name]}")
    _params = loaded


def init_from_yaml(filename):
    """
    Reads a parameter file. Both a flat mapping and the ROS 2 layout
    `<node name>: ros__parameters: {...}` are accepted.
    """
    import yaml
    with open(filename) as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise Exception("Could not read yaml.") from exc
    if not isinstance(loaded, dict) or not loaded:
        raise Exception("The provided YAML file does not have the right format.")
    key1 = list(loaded.keys())[0]
    if isinstance(loaded[key1], dict) and "ros__parameters" in loaded[key1]:
        loaded = loaded[key1]["ros__parameters"]
    init_from_dict(loaded)


def reset():
    global _params
    _params = None


def get_param(key):
    if _params is None:
        raise Exception("Parameters not loaded, call init first!")
    if key not in _params:
        raise Exception(f"Parameter '{key}' not found!")

    return _params[key]


def _get_param_or(key, default):
    if _params is not None and key not in _params:
        return default
    return get_param(key)


def gauss_newton_parameters() -> GaussNewtonParameters:
    """
    Builds the optimizer parameters from the loaded values. Parameters missing from the
    loaded set keep the defaults of GaussNewtonParameters, only `linearization_point` may stay unset.
    """
    defaults = GaussNewtonParameters()
    default_weights = PairWeights()

    linearization_point = None
    lp = _get_param_or("linearization_point", None)
    if lp is not None:
        if len(lp) != 6:
            raise Exception("Parameter 'linearization_point' must be [x, y, z, yaw, pitch, roll].")
        linearization_point = Transformation.from_xyz_ypr(*lp)

    return GaussNewtonParameters(
        linearization_point=linearization_point,
        kernel=RobustKernel.from_name(_get_param_or("robust_kernel", defaults.kernel.value)),
        kernel_param=_get_param_or("robust_kernel_param", defaults.kernel_param),
        pair_weights=PairWeights(
            pt2pt=_get_param_or("weight_pt2pt", default_weights.pt2pt),
            pt2ln=_get_param_or("weight_pt2ln", default_weights.pt2ln),
            pt2pl=_get_param_or("weight_pt2pl", default_weights.pt2pl),
            pl2pl=_get_param_or("weight_pl2pl", default_weights.pl2pl),
            ln2ln=_get_param_or("weight_ln2ln", default_weights.ln2ln),
        ),
        max_inner_loop_iterations=_get_param_or("max_inner_loop_iterations", defaults.max_inner_loop_iterations),
        max_cost=_get_param_or("max_cost", defaults.max_cost),
        min_delta=_get_param_or("min_delta", defaults.min_delta),
        verbose=_get_param_or("verbose", defaults.verbose),
    )
