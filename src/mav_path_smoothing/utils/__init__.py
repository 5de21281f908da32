from .plot.plot3d import Plot3D

__all__ = ["Plot3D"]
