"""
Offline MRZ text reader: locate the MRZ band with morphology, then OCR it
with Tesseract's `mrz` language model.
"""
import logging

import cv2
import imutils
import numpy as np
import pytesseract
from imutils.contours import sort_contours

from mrzscan.config import Settings
from mrzscan.errors import InvalidImageError, MrzNotFoundError
from mrzscan.mrz import find_mrz_lines

logger = logging.getLogger(__name__)

MRZ_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ<"

# Dictionaries only hurt on MRZ text.
_DAWG_FLAGS = (
	"load_system_dawg",
	"load_freq_dawg",
	"load_unambig_dawg",
	"load_punc_dawg",
	"load_number_dawg",
	"load_fixed_length_dawgs",
	"load_bigram_dawg",
	"wordrec_enable_assoc",
)


def tesseract_config(tessdata_dir):
	flags = " ".join(f"-c {flag}=F" for flag in _DAWG_FLAGS)
	return (
		f"--tessdata-dir {tessdata_dir} --psm 6 -l mrz {flags} "
		f"-c tessedit_char_whitelist={MRZ_ALPHABET}"
	)


class MrzLocator:
	"""Find the MRZ band in a document photo."""

	def __init__(self, kernel_scale=0.06, max_kernel=120, kernel_height=None):
		self.kernel_scale = kernel_scale
		self.max_kernel = max_kernel
		self.kernel_height = kernel_height

	def char_height(self, gray):
		"""Median height of letter-sized blobs, used for the vertical kernel."""
		H, W = gray.shape
		letters = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY_INV | cv2.THRESH_OTSU)[1]
		letters = cv2.morphologyEx(letters, cv2.MORPH_OPEN, cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3)))
		cnts = imutils.grab_contours(
			cv2.findContours(letters, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
		)
		heights = []
		for c in cnts:
			(_, _, w, h) = cv2.boundingRect(c)
			if 2 < w < W * 0.5 and 3 < h < H * 0.5:
				heights.append(h)
		return int(np.median(heights)) if heights else 6

	def kernels(self, gray):
		H, W = gray.shape
		rect_w = max(25, min(int(W * self.kernel_scale), self.max_kernel))

		if self.kernel_height is not None:
			rect_h = max(1, int(self.kernel_height))
		elif H > W:
			rect_h = max(3, min(int(self.char_height(gray) * 1.2), 25))
		else:
			rect_h = max(3, min(7, int(H * 0.01)))

		sq = max(21, min(int(min(W, H) * 0.05), self.max_kernel))
		return (
			cv2.getStructuringElement(cv2.MORPH_RECT, (rect_w, rect_h)),
			cv2.getStructuringElement(cv2.MORPH_RECT, (sq, sq)),
			cv2.getStructuringElement(cv2.MORPH_RECT, (1, rect_h)),
		)

	def band_mask(self, gray):
		"""Threshold mask in which the MRZ lines merge into one wide blob."""
		H, W = gray.shape
		rect_k, sq_k, vert_k = self.kernels(gray)
		gray = cv2.GaussianBlur(gray, (3, 3), 0)

		blackhat = cv2.morphologyEx(gray, cv2.MORPH_BLACKHAT, rect_k)
		grad = np.absolute(cv2.Sobel(blackhat, ddepth=cv2.CV_32F, dx=1, dy=0, ksize=-1))
		lo, hi = float(np.min(grad)), float(np.max(grad))
		if hi == lo:
			return np.zeros_like(gray)
		grad = ((grad - lo) / (hi - lo) * 255).astype("uint8")

		grad = cv2.morphologyEx(grad, cv2.MORPH_CLOSE, rect_k)
		mask = cv2.threshold(grad, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)[1]
		inset = int(max(W, H) * 0.04)
		mask[:, :inset] = 0
		mask[:, W - inset:] = 0

		mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, sq_k)
		mask = cv2.erode(mask, None, iterations=2)
		return cv2.morphologyEx(mask, cv2.MORPH_OPEN, vert_k)

	def locate(self, gray):
		"""Bounding box (x, y, w, h) of the lowest full-width band, or None."""
		H, W = gray.shape
		cnts = imutils.grab_contours(
			cv2.findContours(self.band_mask(gray), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
		)
		if not cnts:
			return None
		for c in sort_contours(cnts, method="bottom-to-top")[0]:
			(x, y, w, h) = cv2.boundingRect(c)
			if w / float(W) > 0.8 and h / float(H) > 0.04:
				return (x, y, w, h)
		return None

	def crop(self, image, box):
		"""Crop the band with a 3% margin, clamped to the image."""
		H, W = image.shape[:2]
		(x, y, w, h) = box
		pX, pY = int((x + w) * 0.03), int((y + h) * 0.03)
		x0, y0 = max(0, x - pX), max(0, y - pY)
		x1, y1 = min(W, x + w + pX), min(H, y + h + pY)
		if x1 <= x0 or y1 <= y0:
			return None
		return image[y0:y1, x0:x1]


class MrzPreprocessor:
	"""Prepare a cropped MRZ band for Tesseract."""

	def __init__(self, scale_factor=4.8):
		self.scale_factor = scale_factor

	def preprocess(self, band):
		gray = cv2.cvtColor(band, cv2.COLOR_BGR2GRAY) if band.ndim == 3 else band
		h, w = gray.shape
		scaled = cv2.resize(
			gray, (int(w * self.scale_factor), int(h * self.scale_factor)), interpolation=cv2.INTER_CUBIC
		)
		scaled = cv2.normalize(scaled, None, 0, 255, cv2.NORM_MINMAX)
		# unsharp mask
		blur = cv2.GaussianBlur(scaled, (0, 0), sigmaX=2.0)
		sharp = cv2.addWeighted(scaled, 1.5, blur, -0.5, 0)
		return np.clip(sharp, 0, 255).astype(np.uint8)


def decode_image(image_bytes):
	if not image_bytes:
		raise InvalidImageError()
	image = cv2.imdecode(np.frombuffer(image_bytes, np.uint8), cv2.IMREAD_COLOR)
	if image is None:
		raise InvalidImageError()
	return image


def read_mrz_text(image_bytes, settings=None, locator=None, preprocessor=None):
	"""
	OCR the MRZ of a document photo.

	Args:
		image_bytes: encoded image (JPEG, PNG, ...).
		settings: supplies the directory holding mrz.traineddata.

	Returns:
		The MRZ lines joined by newlines.

	Raises:
		InvalidImageError: the bytes are not a decodable image.
		MrzNotFoundError: no MRZ band, or the OCR text holds no MRZ lines.
	"""
	settings = settings or Settings()
	locator = locator or MrzLocator()
	preprocessor = preprocessor or MrzPreprocessor()

	image = decode_image(image_bytes)
	gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

	box = locator.locate(gray)
	band = locator.crop(image, box) if box is not None else None
	if band is None:
		logger.info("MRZ band could not be found")
		raise MrzNotFoundError("no MRZ band in image")

	prepared = preprocessor.preprocess(band)
	text = pytesseract.image_to_string(prepared, config=tesseract_config(settings.tessdata_dir))
	lines = find_mrz_lines(text)
	if not lines:
		logger.info("OCR returned no MRZ-shaped lines")
		logger.debug("Raw OCR text: %r", text)
		raise MrzNotFoundError("no MRZ lines in OCR text")
	return "\n".join(lines)
