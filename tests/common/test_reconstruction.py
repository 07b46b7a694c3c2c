"""Unit tests for the Reconstruction class."""

import unittest

import gtsam  # type: ignore
import numpy as np
import numpy.testing as npt
from gtsam import Cal3Bundler, PinholeCameraCal3Bundler, Point2, Point3, Pose3, SfmTrack

from sfmexport.common.reconstruction import Reconstruction, Track, View

GTSAM_EXAMPLE_FILE = "dubrovnik-3-7-pre"  # Example data with 3 cameras and 7 tracks.
EXAMPLE_DATA = Reconstruction.read_bal(gtsam.findExampleDataFile(GTSAM_EXAMPLE_FILE))

DEFAULT_CAMERA = PinholeCameraCal3Bundler(Pose3(), Cal3Bundler(fx=100, k1=0, k2=0, u0=0, v0=0))


class TestReconstruction(unittest.TestCase):
    """Unit tests for Reconstruction."""

    def test_number_views(self) -> None:
        self.assertEqual(EXAMPLE_DATA.number_views(), 3)
        self.assertListEqual(EXAMPLE_DATA.view_ids(), [0, 1, 2])

    def test_number_tracks(self) -> None:
        self.assertEqual(EXAMPLE_DATA.number_tracks(), 7)
        self.assertListEqual(EXAMPLE_DATA.track_ids(), list(range(7)))

    def test_read_bundler(self) -> None:
        data = Reconstruction.read_bundler(gtsam.findExampleDataFile("Balbianello.out"))
        self.assertEqual(data.number_views(), 5)
        self.assertEqual(data.number_tracks(), 544)

    def test_observations_are_symmetric(self) -> None:
        """Every view listed by a track holds a feature for that track, and vice versa."""
        for track_id in EXAMPLE_DATA.track_ids():
            for view_id in EXAMPLE_DATA.get_track(track_id).view_ids():
                self.assertIsNotNone(EXAMPLE_DATA.get_view(view_id).get_feature(track_id))

        for view_id in EXAMPLE_DATA.view_ids():
            for track_id in EXAMPLE_DATA.get_view(view_id).track_ids():
                self.assertIn(view_id, EXAMPLE_DATA.get_track(track_id).view_ids())

    def test_from_cameras_and_tracks(self) -> None:
        """Non-contiguous camera indices become view ids, and list positions become track ids."""
        sfm_track = SfmTrack(Point3(1.0, 2.0, 3.0))
        sfm_track.r, sfm_track.g, sfm_track.b = 200.0, 100.0, 50.0
        sfm_track.addMeasurement(4, Point2(10.0, 20.0))
        sfm_track.addMeasurement(1, Point2(30.0, 40.0))

        data = Reconstruction.from_cameras_and_tracks(
            {1: DEFAULT_CAMERA, 4: DEFAULT_CAMERA}, [sfm_track], image_filenames=[f"{i}.png" for i in range(5)]
        )

        self.assertListEqual(data.view_ids(), [1, 4])
        self.assertEqual(data.get_view(4).name(), "4.png")
        track = data.get_track(0)
        npt.assert_array_equal(track.point(), [1.0, 2.0, 3.0, 1.0])
        npt.assert_array_equal(track.color(), [200.0, 100.0, 50.0])
        self.assertListEqual(track.view_ids(), [4, 1])
        npt.assert_array_equal(data.get_view(1).get_feature(0), [30.0, 40.0])

    def test_default_view_names(self) -> None:
        self.assertEqual(EXAMPLE_DATA.get_view(2).name(), "image_2")

    def test_get_missing_ids(self) -> None:
        self.assertIsNone(EXAMPLE_DATA.get_view(100))
        self.assertIsNone(EXAMPLE_DATA.get_track(100))

    def test_add_view_keeps_existing(self) -> None:
        data = Reconstruction()
        first = data.add_view(3, "first.jpg", DEFAULT_CAMERA)
        second = data.add_view(3, "second.jpg", DEFAULT_CAMERA)
        self.assertIs(first, second)
        self.assertEqual(data.get_view(3).name(), "first.jpg")

    def test_add_observation_unknown_ids(self) -> None:
        data = Reconstruction()
        data.add_view(0, "a.jpg", DEFAULT_CAMERA)
        data.add_track(0, np.zeros(3), (0, 0, 0))
        with self.assertRaises(ValueError):
            data.add_observation(1, 0, np.zeros(2))
        with self.assertRaises(ValueError):
            data.add_observation(0, 1, np.zeros(2))

    def test_view_track_order(self) -> None:
        """A view lists its tracks in the order they were observed."""
        data = Reconstruction()
        data.add_view(0, "a.jpg", DEFAULT_CAMERA)
        for track_id in [9, 2, 5]:
            data.add_track(track_id, np.zeros(3), (0, 0, 0))
            data.add_observation(0, track_id, np.array([track_id, track_id]))
        self.assertListEqual(data.get_view(0).track_ids(), [9, 2, 5])


class TestTrack(unittest.TestCase):
    def test_homogeneous_point(self) -> None:
        track = Track(np.array([3.0, -6.0, 9.0, 3.0]), (0, 0, 0))
        npt.assert_array_equal(track.point3(), [1.0, -2.0, 3.0])

    def test_euclidean_point_is_lifted(self) -> None:
        track = Track(np.array([1.0, 2.0, 3.0]), (0, 0, 0))
        npt.assert_array_equal(track.point(), [1.0, 2.0, 3.0, 1.0])

    def test_invalid_point(self) -> None:
        with self.assertRaises(ValueError):
            Track(np.zeros(2), (0, 0, 0))

    def test_add_view_once(self) -> None:
        track = Track(np.zeros(3), (0, 0, 0))
        track.add_view(2)
        track.add_view(2)
        self.assertEqual(track.number_views(), 1)

    def test_add_view_keeps_first_occurrence_order(self) -> None:
        track = Track(np.zeros(3), (0, 0, 0))
        for view_id in [5, 2, 5, 7, 2]:
            track.add_view(view_id)
        self.assertListEqual(track.view_ids(), [5, 2, 7])
        self.assertEqual(track.number_views(), 3)


class TestView(unittest.TestCase):
    def test_requires_camera(self) -> None:
        with self.assertRaises(ValueError):
            View("a.jpg", None)


if __name__ == "__main__":
    unittest.main()
