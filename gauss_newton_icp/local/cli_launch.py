import argparse
import logging
import pathlib
import sys

from .pairings_import import load_pairings_yaml
from ..core import parameters
from ..core.optimal_tf_gauss_newton import optimal_tf_gauss_newton
from ..core.transformation import apply_transformation, calc_transformation_scipy

logger = logging.getLogger(__name__)

formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# ouput log info to console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(formatter)


def _setup_logging(log_file: str | None) -> logging.FileHandler | None:
    root = logging.getLogger("gauss_newton_icp")
    root.setLevel(logging.INFO)
    if console_handler not in root.handlers:
        root.addHandler(console_handler)
    if log_file:
        # save log info to log-file
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        return file_handler
    return None


def _close_log_file(file_handler: logging.FileHandler | None):
    if file_handler is not None:
        logging.getLogger("gauss_newton_icp").removeHandler(file_handler)
        file_handler.close()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gauss-Newton SE(3) alignment of geometric pairings")
    parser.add_argument("--pairings", help="Mandatory, location of the YAML file with the pairings", required=True)
    parser.add_argument("--param-file", help="Location of parameter YAML file, otherwise default will be used")
    parser.add_argument("--kabsch-init", action="store_true",
                        help="Use the closed-form solution of the point-to-point pairings as linearization point "
                             "instead of the configured one.")
    parser.add_argument("--log-file", help="Additionally write log output to this file.")
    parser.add_argument("--plot-convergence", action="store_true",
                        help="Plot the residual norm of each iteration (requires matplotlib).")
    parser.add_argument("--visualize-alignment", action="store_true",
                        help="Show the aligned point-to-point pairings in open3d (requires open3d).")
    return parser


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    file_handler = _setup_logging(args.log_file)
    try:
        return _run(args)
    finally:
        _close_log_file(file_handler)


def _run(args):
    # load parameters
    if args.param_file:
        if not pathlib.Path(args.param_file).is_file():
            logger.warning("Could not find given parameter file! Omit option to use defaults. Aborting.")
            sys.exit(1)
        paramfile = args.param_file
    else:
        paramfile = (
                pathlib.Path(__file__).parent.parent.parent / "default_parameters.yaml"
        ).absolute()  # use default params
    parameters.init_from_yaml(paramfile)
    gn_params = parameters.gauss_newton_parameters()

    if not pathlib.Path(args.pairings).is_file():
        logger.warning("Given pairings file does not exist, aborting.")
        sys.exit(1)
    pairings = load_pairings_yaml(args.pairings)
    logger.info(f"Loaded pairings from {pathlib.Path(args.pairings).name}: {pairings.contents_summary()}")

    if args.kabsch_init:
        if len(pairings.pt2pt) < 3:
            logger.warning("Closed-form initialization needs at least 3 point-to-point pairings. Aborting.")
            sys.exit(1)
        local, glob = pairings.point_pair_arrays()
        gn_params.linearization_point = calc_transformation_scipy(local, glob)
        logger.info("Using closed-form solution as linearization point.")

    if gn_params.linearization_point is None:
        logger.warning("No linearization point configured, use --kabsch-init or set 'linearization_point'. "
                       "Aborting.")
        sys.exit(1)

    result = optimal_tf_gauss_newton(pairings, gn_params)

    logger.info(f"Finished with '{result.termination.value}' after {result.iterations} iterations, "
                f"error norm {result.error_norm}")
    logger.info("Transformation result:\nR=")
    logger.info(result.optimal_pose.R)
    logger.info("t =")
    logger.info(result.optimal_pose.t)

    if args.plot_convergence:
        from .visualization.convergence_plot import plot_convergence
        plot_convergence(result.error_history)
    if args.visualize_alignment:
        local, glob = pairings.point_pair_arrays()
        try:
            from .visualization.trafo_visualization import visualize_alignment
        except (ImportError, OSError) as e:
            # ImportError: package not installed
            # OSError: missing native libs (e.g. libGL.so.1) in headless/container environment
            logger.warning(f"Open3D unavailable (reason: {e}). Skipping visualization.")
        else:
            visualize_alignment(apply_transformation(local, result.optimal_pose), glob)

    return result


if __name__ == "__main__":
    main()
