# tldtrack

Building blocks for Tracking-Learning-Detection on greyscale images held as
NumPy arrays. The package has two parts:

* a **median-flow tracker**. It follows a bounding box from one frame to the
  next. A 10x10 grid of points inside the box is tracked with pyramidal
  Lucas-Kanade optical flow, and each point is checked forwards and backwards;
* the **stages of a sliding-window detector**: a foreground detector, a
  variance filter, an ensemble of random ferns, and a clustering step for the
  windows that pass.

## Installation

```
pip install tldtrack
```

It needs `numpy` and `scipy`.

## Tracking a box between frames

`tldtrack.median_flow_tracker.MedianFlowTracker` takes a `Rect` from the
previous frame and tracks it into the current one:

```python
import numpy as np
from tldtrack.median_flow_tracker import MedianFlowTracker
from tldtrack.util import Rect

prev_frame = ...  # 2-D uint8 array
curr_frame = ...  # 2-D uint8 array of the same size

tracker = MedianFlowTracker()
tracker.track(prev_frame, curr_frame, Rect(40, 30, 50, 60))
print(tracker.tracker_bb)  # a Rect, or None if tracking failed
```

`tracker_bb` is set only in two cases: tracking succeeds, and the new box
lies wholly inside the current frame. `clean_previous_data()` clears it.

The lower-level call is `tldtrack.fbtrack.fbtrack(img_i, img_j, bb)`. It
takes a box given as corner points `(x1, y1, x2, y2)` and returns a
`TrackResult` with these fields:

* `bb`, the new box;
* `scale`, the relative scale change;
* `success`, which is false when the median forward-backward error is above
  10 pixels or when too few points survive;
* `median_fb` and `median_ncc`.

## Other modules

* `tldtrack.lk`: `track_lk` tracks points forwards and backwards and returns
  an `LKResult` holding points, forward-backward errors, correlations and
  status. The helpers `calc_optical_flow_pyr_lk`, `get_rect_sub_pix`,
  `match_template_ccoeff_normed`, `norm_cross_correlation` and
  `euclidean_distance` are in the same module.
* `tldtrack.bbpredict`: `predict_bb` moves and rescales a box using the
  median displacement of matched point pairs and the median ratio of their
  pairwise distances.
* `tldtrack.bb`: `filled_bb_points` and `bb_center`.
* `tldtrack.median`: `median` and `median_in_place`, a quickselect median.
  For an even count it returns the lower middle value.
* `tldtrack.util`: the `Rect` class; box overlap (`bb_overlap`,
  `overlap`, `overlap_rect`, `overlap_one`, `overlap_rect_rect`,
  `is_inside`); `calc_mean` and `calc_variance`; `resize_bilinear`; and the
  15x15 mean-normalised patch extraction functions (`normalize_img`,
  `extract_normalized_patch`, `extract_normalized_patch_bb`,
  `extract_normalized_patch_rect`).
* `tldtrack.integral_image`: `integral_image(img, squared=False)`.
* `tldtrack.detection_result`: `DetectionResult`, which holds the per-window
  posteriors, variances and fern codes, the confident indices, the
  foreground list, the cluster count and the detector box.
* `tldtrack.variance_filter`: `VarianceFilter`. It rejects a window whose
  grey-level variance is below `min_var`.
* `tldtrack.foreground_detector`: `ForegroundDetector`. It subtracts a
  background image (`bg_img`), labels 8-connected blobs above
  `fg_threshold`, and writes the bounding boxes of blobs of at least
  `min_blob_size` pixels into the result's `fg_list`.
* `tldtrack.ensemble_classifier`: `EnsembleClassifier`, a set of random
  ferns. It has methods to draw features, classify windows and learn from
  samples it gets wrong. A `seed` may be passed for reproducible features.
* `tldtrack.clustering`: `Clustering`. It groups confident windows by
  overlap (distance is one minus overlap, cutoff 0.5). When exactly one
  cluster results, it sets the mean rectangle as `detector_bb`.

The detector stages expect the caller to supply several things:

* window offsets, with six values per window: four corner indices into the
  flattened integral image, a feature pointer, and the area;
* the scales;
* a shared `DetectionResult`.

## What this package does not do

* It has no nearest-neighbour patch classifier.
* It has no component that builds the sliding windows and runs the stages in
  sequence over a frame.
* It does not fuse the tracker's box with the detector's box.
* It has no online learning loop that updates the model from a valid
  trajectory.
* It cannot save or load a learned model.
* It has no command-line program.

The median-flow tracker and the detector stages are separate pieces. Any
end-to-end tracking-by-detection loop has to be written by the caller.