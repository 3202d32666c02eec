"""
Recovery strategies for raw compiler output.

The compiler writes in whatever code page the host uses, separates lines
with CRLF on Windows and may print non-finite floats that are not valid
JSON numbers. These helpers turn its raw bytes into lines the record decoder
can read.
"""

import logging
import re
from typing import Tuple
import chardet

logger = logging.getLogger(__name__)

# Infinity, -Infinity and NaN tokens produced by the compiler's float printer
_NON_FINITE_TOKEN = re.compile(r'-?\bInfinity\b|\bNaN\b')

# Value substituted for non-finite numbers
NON_FINITE_REPLACEMENT = "0.0"


class OutputRecovery:
    """Decoding and normalization of compiler output"""

    @staticmethod
    def strip_carriage_returns(chunk: bytes) -> bytes:
        """Normalize CRLF line endings while streaming"""
        return chunk.replace(b"\r", b"")

    @staticmethod
    def detect_encoding(raw_data: bytes) -> str:
        """
        Detect output encoding.

        Args:
            raw_data: Raw compiler output

        Returns:
            Detected encoding name, utf-8 when detection is not confident
        """
        detection = chardet.detect(raw_data[:10000])
        if detection and detection.get('encoding') and detection['confidence'] > 0.7:
            return detection['encoding']

        return 'utf-8'

    @staticmethod
    def decode(raw_data: bytes) -> Tuple[str, str]:
        """
        Decode output with multiple encoding attempts.

        Args:
            raw_data: Raw compiler output

        Returns:
            (text, actual_encoding_used)
        """
        try:
            return raw_data.decode('utf-8'), 'utf-8'
        except UnicodeDecodeError:
            pass

        detected_encoding = OutputRecovery.detect_encoding(raw_data)

        # Try encodings in order of preference
        encodings = [
            detected_encoding,
            'utf-8-sig',
            'cp1252'
        ]

        # Remove duplicates while preserving order
        encodings = list(dict.fromkeys(encodings))

        for encoding in encodings:
            try:
                text = raw_data.decode(encoding)
                logger.debug(f"Decoded compiler output with encoding: {encoding}")
                return text, encoding
            except (UnicodeDecodeError, LookupError) as e:
                logger.debug(f"Failed to decode compiler output with {encoding}: {e}")
                continue

        # Final fallback: replace undecodable bytes
        logger.warning("Using replacement fallback for compiler output")
        return raw_data.decode('utf-8', errors='replace'), 'utf-8-replace-fallback'

    @staticmethod
    def normalize_non_finite(line: str) -> str:
        """Replace non-finite numeric tokens with a safe number"""
        return _NON_FINITE_TOKEN.sub(NON_FINITE_REPLACEMENT, line)
