"""Functions to export reconstructions to disk.

The NVM exporter writes the text format read by VisualSfM and other SfM viewers:
    NVM_V3

    <number of cameras>
    <name> <focal length> <qw> <qx> <qy> <qz> <cx> <cy> <cz> <radial distortion> 0
    <number of points>
    <x> <y> <z> <r> <g> <b> <number of measurements> (<image index> <feature index> <u> <v>)*
    0

NVM stores each measurement relative to the principal point of its image. The principal points are saved to a
companion "_offsets.txt" file, one "<name> <px> <py>" line per camera, so that the shift can be undone.
"""

from pathlib import Path
from typing import Dict, TextIO, Tuple, Union

import numpy as np

import sfmexport.common.types as sfm_types
import sfmexport.utils.logger as logger_utils
from sfmexport.common.reconstruction import Reconstruction
from sfmexport.common.types import TrackId, ViewId

logger = logger_utils.get_logger()

NVM_HEADER = "NVM_V3"
NVM_EXTENSION_LENGTH = 4  # ".nvm"
OFFSETS_SUFFIX = "_offsets.txt"


def _fmt(value: float) -> str:
    """Formats a float with 17 significant digits, enough to round-trip any double."""
    return f"{float(value):.17g}"


def get_offsets_fpath(nvm_fpath: Union[str, Path]) -> str:
    """Returns the path of the principal point offsets file accompanying an NVM file.

    The last 4 characters (the ".nvm" extension) are replaced by "_offsets.txt". Paths shorter than the extension
    lose everything, e.g. "ab" gives "_offsets.txt".
    """
    nvm_fpath = str(nvm_fpath)
    return nvm_fpath[: max(len(nvm_fpath) - NVM_EXTENSION_LENGTH, 0)] + OFFSETS_SUFFIX


def write_nvm_file(nvm_fpath: Union[str, Path], reconstruction: Reconstruction) -> bool:
    """Writes a reconstruction to an NVM file, plus the principal point offsets of its cameras.

    Reference: http://ccwu.me/vsfm/doc.html#nvm

    Args:
        nvm_fpath: Path of the .nvm file to create. Existing files are overwritten.
        reconstruction: Scene data to write.

    Returns:
        True on success, False if either output file could not be opened for writing.

    Raises:
        ValueError: If a track claims an observation that its view does not hold.
    """
    offsets_fpath = get_offsets_fpath(nvm_fpath)

    logger.info("Writing nvm: %s", nvm_fpath)
    try:
        nvm_file = open(nvm_fpath, "w")
    except OSError:
        logger.warning("Could not open nvm file for writing: %s", nvm_fpath)
        return False

    with nvm_file:
        logger.info("Writing optical offsets: %s", offsets_fpath)
        try:
            offsets_file = open(offsets_fpath, "w")
        except OSError:
            logger.warning("Could not open file for writing: %s", offsets_fpath)
            return False

        with offsets_file:
            nvm_file.write(f"{NVM_HEADER}\n\n")
            view_id_to_index, feature_index_mapping = _write_nvm_cameras(nvm_file, offsets_file, reconstruction)
            _write_nvm_points(nvm_file, reconstruction, view_id_to_index, feature_index_mapping)
            # Indicate the end of the file.
            nvm_file.write("0\n")

    return True


def _write_nvm_cameras(
    nvm_file: TextIO, offsets_file: TextIO, reconstruction: Reconstruction
) -> Tuple[Dict[ViewId, int], Dict[ViewId, Dict[TrackId, int]]]:
    """Writes the camera section and the offsets file, and builds the index maps used by the point section.

    Returns:
        view_id_to_index: Index of each view in the camera section.
        feature_index_mapping: For each view, the index of each observed track among that view's features. These are
            unique within one view only, not across the reconstruction.
    """
    view_ids = reconstruction.view_ids()
    nvm_file.write(f"{len(view_ids)}\n")

    view_id_to_index: Dict[ViewId, int] = {}
    feature_index_mapping: Dict[ViewId, Dict[TrackId, int]] = {}
    printed_warning = False
    for view_id in view_ids:
        view_id_to_index[view_id] = len(view_id_to_index)

        view = reconstruction.get_view(view_id)
        camera = view.camera()
        calibration = camera.calibration()

        # NVM stores the world-to-camera rotation, and the camera center in world coordinates.
        wTc = camera.pose()
        cRw_quaternion = wTc.rotation().inverse().toQuaternion()
        qw, qx, qy, qz = cRw_quaternion.w(), cRw_quaternion.x(), cRw_quaternion.y(), cRw_quaternion.z()
        cx, cy, cz = wTc.translation()

        # Poses are still worth saving when the intrinsics model cannot be expressed in NVM.
        radial_distortion = sfm_types.get_radial_distortion(calibration)
        if radial_distortion is None:
            radial_distortion = 0
            if not printed_warning:
                logger.info("Will save the camera poses, but not the intrinsics, to the NVM output file.")
                printed_warning = True

        fields = [calibration.fx(), qw, qx, qy, qz, cx, cy, cz, radial_distortion]
        nvm_file.write(f"{view.name()} {' '.join(_fmt(v) for v in fields)} 0\n")
        offsets_file.write(f"{view.name()} {_fmt(calibration.px())} {_fmt(calibration.py())}\n")

        feature_index_mapping[view_id] = {track_id: k for k, track_id in enumerate(view.track_ids())}

    return view_id_to_index, feature_index_mapping


def _write_nvm_points(
    nvm_file: TextIO,
    reconstruction: Reconstruction,
    view_id_to_index: Dict[ViewId, int],
    feature_index_mapping: Dict[ViewId, Dict[TrackId, int]],
) -> None:
    """Writes the point section, referencing cameras and features through the index maps."""
    track_ids = reconstruction.track_ids()
    nvm_file.write(f"{len(track_ids)}\n")

    for track_id in track_ids:
        track = reconstruction.get_track(track_id)
        x, y, z = track.point3()
        r, g, b = (int(c) for c in track.color())
        fields = [_fmt(x), _fmt(y), _fmt(z), str(r), str(g), str(b), str(track.number_views())]

        for view_id in track.view_ids():
            view = reconstruction.get_view(view_id)
            if view is None or view_id not in view_id_to_index:
                raise ValueError(f"Track {track_id} is observed by view {view_id}, which is not in the reconstruction.")
            feature_index = feature_index_mapping[view_id].get(track_id)
            feature = view.get_feature(track_id)
            if feature_index is None or feature is None:
                raise ValueError(f"Track {track_id} claims view {view_id}, but the view holds no feature for it.")

            # Measurements are relative to the principal point.
            calibration = view.camera().calibration()
            u, v = feature - np.array([calibration.px(), calibration.py()])
            fields += [str(view_id_to_index[view_id]), str(feature_index), _fmt(u), _fmt(v)]

        nvm_file.write(" ".join(fields) + "\n")
