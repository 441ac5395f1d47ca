import numpy as np
import open3d as o3d

colors = [
    np.array([240, 185, 64]) / 255,  # local points, transformed
    np.array([51, 105, 159]) / 255,  # global points
]


def np_to_pointcloud(points_in):
    points = points_in[~(np.isnan(points_in).any(axis=1))]  # remove nans
    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(points[:, :3])
    return pcd


def visualize_alignment(local_transformed: np.ndarray, global_points: np.ndarray, draw_pair_lines=True):
    """
    Draws the point-to-point pairings after alignment: transformed local points and global points in
    different colors. Does not apply any transformation itself.

    :param local_transformed: (N, 3) local points with the optimized transformation applied
    :param global_points: (N, 3) corresponding global points
    :param draw_pair_lines: connect corresponding points with a line, showing the remaining residuals
    """
    assert local_transformed.shape == global_points.shape
    geoms = []
    for p, col in zip([local_transformed, global_points], colors):
        geom = np_to_pointcloud(p)
        geom.paint_uniform_color(col)
        geoms.append(geom)
    if draw_pair_lines and len(global_points) > 0:
        n = len(global_points)
        lines = o3d.geometry.LineSet()
        lines.points = o3d.utility.Vector3dVector(np.vstack((local_transformed, global_points)))
        lines.lines = o3d.utility.Vector2iVector(np.array([[i, i + n] for i in range(n)]))
        lines.paint_uniform_color(np.array([0.5, 0.5, 0.5]))
        geoms.append(lines)
    o3d.visualization.draw_geometries(geoms)
