"""Classes to hold the views and tracks of a 3D scene reconstruction.

A view is one calibrated image; a track is one triangulated 3D point together with the views that observed it. Each
view also remembers the 2D feature at which it observed every one of its tracks, in the order they were added.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Set

import gtsam  # type: ignore
import numpy as np
from gtsam import SfmTrack

import sfmexport.common.types as sfm_types
from sfmexport.common.types import TrackId, ViewId


class View:
    """A named image, the camera that captured it, and the 2D features it observed."""

    def __init__(self, name: str, camera: sfm_types.CAMERA_TYPE) -> None:
        """Initializes the view.

        Args:
            name: human readable name of the image, e.g. its file name.
            camera: gtsam camera holding the pose (wTc) and calibration of the image.
        """
        if camera is None:
            raise ValueError("Camera cannot be None, should be a valid camera")
        self._name = name
        self._camera = camera
        self._features: Dict[TrackId, np.ndarray] = {}

    def __repr__(self) -> str:
        return f"View(name={self._name}, num_features={len(self._features)})"

    def name(self) -> str:
        return self._name

    def camera(self) -> sfm_types.CAMERA_TYPE:
        return self._camera

    def track_ids(self) -> List[TrackId]:
        """Returns ids of the tracks observed in this view, in the order they were added."""
        return list(self._features.keys())

    def get_feature(self, track_id: TrackId) -> Optional[np.ndarray]:
        """Returns the (x, y) pixel observation of the track in this view, or None."""
        return self._features.get(track_id)

    def add_feature(self, track_id: TrackId, feature: np.ndarray) -> None:
        self._features[track_id] = np.asarray(feature, dtype=np.float64).reshape(2)


class Track:
    """A homogeneous 3D point, its color, and the ids of the views observing it."""

    def __init__(self, point: np.ndarray, color: Sequence[float]) -> None:
        """Initializes the track.

        Args:
            point: homogeneous (4,) point, or Euclidean (3,) point which is lifted with w = 1.
            color: (r, g, b) color of the point.
        """
        point = np.asarray(point, dtype=np.float64).reshape(-1)
        if point.shape == (3,):
            point = np.append(point, 1.0)
        if point.shape != (4,):
            raise ValueError(f"Track point must have 3 or 4 coordinates, got {point.shape}")
        self._point = point
        self._color = np.asarray(color, dtype=np.float64).reshape(3)
        self._view_ids: List[ViewId] = []
        self._view_id_set: Set[ViewId] = set()

    def __repr__(self) -> str:
        return f"Track(point={self.point3()}, num_views={len(self._view_ids)})"

    def point(self) -> np.ndarray:
        """Returns the homogeneous point."""
        return self._point

    def point3(self) -> np.ndarray:
        """Returns the Euclidean point, i.e. the homogeneous point after perspective division."""
        return self._point[:3] / self._point[3]

    def color(self) -> np.ndarray:
        return self._color

    def view_ids(self) -> List[ViewId]:
        return self._view_ids

    def number_views(self) -> int:
        return len(self._view_ids)

    def add_view(self, view_id: ViewId) -> None:
        if view_id not in self._view_id_set:
            self._view_id_set.add(view_id)
            self._view_ids.append(view_id)


class Reconstruction:
    """Views and tracks, essentially describing the complete 3D scene.

    Ids need not be contiguous. Views and tracks are enumerated in insertion order.
    """

    def __init__(self) -> None:
        self._views: Dict[ViewId, View] = {}
        self._tracks: Dict[TrackId, Track] = {}

    def __repr__(self) -> str:
        """String representation of the object."""
        return f"Reconstruction(num_views={len(self._views)}, num_tracks={len(self._tracks)})"

    @classmethod
    def from_cameras_and_tracks(
        cls,
        cameras: Mapping[int, sfm_types.CAMERA_TYPE],
        tracks: List[SfmTrack],
        image_filenames: Optional[Sequence[str]] = None,
    ) -> "Reconstruction":
        """Creates a reconstruction from gtsam cameras and tracks.

        Args:
            cameras: cameras in the scene, keyed by image index. The image index becomes the view id.
            tracks: gtsam tracks whose measurements reference image indices. The list position becomes the track id.
            image_filenames (optional): file name for every image index, used as view names.

        Returns:
            A new Reconstruction instance.
        """
        reconstruction = cls()
        for i, camera in cameras.items():
            name = image_filenames[i] if image_filenames is not None else f"image_{i}"
            reconstruction.add_view(i, name, camera)

        for j, sfm_track in enumerate(tracks):
            reconstruction.add_track(j, sfm_track.point3(), (sfm_track.r, sfm_track.g, sfm_track.b))
            for k in range(sfm_track.numberMeasurements()):
                i, uv = sfm_track.measurement(k)
                reconstruction.add_observation(i, j, uv)

        return reconstruction

    @classmethod
    def from_sfm_data(
        cls, sfm_data: gtsam.SfmData, image_filenames: Optional[Sequence[str]] = None
    ) -> "Reconstruction":
        """Initialize from gtsam.SfmData instance.

        Args:
            sfm_data: camera parameters and point tracks.
            image_filenames (optional): file name for every camera, used as view names.

        Returns:
            A new Reconstruction instance.
        """
        cameras = {i: sfm_data.camera(i) for i in range(sfm_data.numberCameras())}
        tracks = [sfm_data.track(j) for j in range(sfm_data.numberTracks())]
        return cls.from_cameras_and_tracks(cameras, tracks, image_filenames)

    @classmethod
    def read_bal(cls, file_path: str) -> "Reconstruction":
        """Read a Bundle Adjustment in the Large" (BAL) file.

        See https://grail.cs.washington.edu/projects/bal/ for more details on the format.

        Args:
            file_path: File path of the BAL file.

        Returns:
            The data as a Reconstruction object.
        """
        sfm_data = gtsam.readBal(file_path)
        return cls.from_sfm_data(sfm_data)

    @classmethod
    def read_bundler(cls, file_path: str) -> "Reconstruction":
        """Read a Bundler file.

        Args:
            file_path: File path of the Bundler file.

        Returns:
            The data as a Reconstruction object.
        """
        sfm_data = gtsam.SfmData.FromBundlerFile(file_path)
        return cls.from_sfm_data(sfm_data)

    def number_views(self) -> int:
        """Returns the number of views."""
        return len(self._views)

    def number_tracks(self) -> int:
        """Returns the number of tracks."""
        return len(self._tracks)

    def view_ids(self) -> List[ViewId]:
        """Returns ids of all views, in insertion order."""
        return list(self._views.keys())

    def track_ids(self) -> List[TrackId]:
        """Returns ids of all tracks, in insertion order."""
        return list(self._tracks.keys())

    def get_view(self, view_id: ViewId) -> Optional[View]:
        """Returns view for given id, or None."""
        return self._views.get(view_id)

    def get_track(self, track_id: TrackId) -> Optional[Track]:
        """Returns track for given id, or None."""
        return self._tracks.get(track_id)

    def add_view(self, view_id: ViewId, name: str, camera: sfm_types.CAMERA_TYPE) -> View:
        """Adds a view if not already present, and returns the view stored under the id."""
        if view_id not in self._views:
            self._views[view_id] = View(name, camera)
        return self._views[view_id]

    def add_track(self, track_id: TrackId, point: np.ndarray, color: Sequence[float]) -> Track:
        """Adds a track if not already present, and returns the track stored under the id."""
        if track_id not in self._tracks:
            self._tracks[track_id] = Track(point, color)
        return self._tracks[track_id]

    def add_observation(self, view_id: ViewId, track_id: TrackId, feature: np.ndarray) -> None:
        """Records that the view observed the track at the given (x, y) pixel location.

        Raises:
            ValueError: if either the view or the track is unknown.
        """
        view = self.get_view(view_id)
        if view is None:
            raise ValueError(f"Cannot add observation of track {track_id}: view {view_id} does not exist.")
        track = self.get_track(track_id)
        if track is None:
            raise ValueError(f"Cannot add observation in view {view_id}: track {track_id} does not exist.")
        view.add_feature(track_id, feature)
        track.add_view(view_id)
