"""Common definitions and helper functions for ids, calibration and camera types.

The set of calibration types is closed: every supported intrinsics model maps to exactly one gtsam calibration class.
Only the pinhole model (gtsam's Cal3Bundler) carries the single radial distortion scalar understood by the NVM format.
"""

from enum import Enum
from typing import Optional, Union

import gtsam  # type: ignore

ViewId = int
TrackId = int

CALIBRATION_TYPE = Union[gtsam.Cal3Bundler, gtsam.Cal3_S2, gtsam.Cal3DS2, gtsam.Cal3Fisheye]
CAMERA_TYPE = Union[
    gtsam.PinholeCameraCal3Bundler,
    gtsam.PinholeCameraCal3_S2,
    gtsam.PinholeCameraCal3DS2,
    gtsam.PinholeCameraCal3Fisheye,
]


class CameraIntrinsicsModelType(Enum):
    """Intrinsics models a camera in a reconstruction may use."""

    PINHOLE = "PINHOLE"  # focal length, principal point and radial distortion (k1, k2)
    LINEAR = "LINEAR"  # fx, fy, skew and principal point, no distortion
    RADIAL_TANGENTIAL = "RADIAL_TANGENTIAL"
    FISHEYE = "FISHEYE"


def get_intrinsics_model_type(calibration: CALIBRATION_TYPE) -> CameraIntrinsicsModelType:
    """Get the intrinsics model tag corresponding to the calibration.

    Args:
        calibration: the calibration object to classify.

    Returns:
        Intrinsics model of the calibration object.
    """
    if isinstance(calibration, gtsam.Cal3Bundler):
        return CameraIntrinsicsModelType.PINHOLE
    if isinstance(calibration, gtsam.Cal3_S2):
        return CameraIntrinsicsModelType.LINEAR
    if isinstance(calibration, gtsam.Cal3DS2):
        return CameraIntrinsicsModelType.RADIAL_TANGENTIAL
    if isinstance(calibration, gtsam.Cal3Fisheye):
        return CameraIntrinsicsModelType.FISHEYE
    else:  # If the calibration type is not recognized, raise an error.
        raise ValueError(f"Unsupported calibration type: {type(calibration)}. Supported types are {CALIBRATION_TYPE}.")


def get_radial_distortion(calibration: CALIBRATION_TYPE) -> Optional[float]:
    """Returns the first radial distortion coefficient of a pinhole calibration, or None for any other model.

    Unlike get_intrinsics_model_type, calibrations outside the supported set are not an error here.
    """
    if isinstance(calibration, gtsam.Cal3Bundler):
        return float(calibration.k1())
    return None
