"""Errors raised while accepting, routing and converting an upload.

Everything below ``ConverterError`` knows its HTTP status and the message
that is safe to hand back to the browser.
"""


class ConverterError(Exception):
    status_code = 500
    default_message = "Conversion failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


# ------ CLIENT INPUT (400) ------

class ValidationError(ConverterError):
    status_code = 400
    default_message = "Invalid request."


class NoFileError(ValidationError):
    default_message = "No file uploaded."


class UnsupportedFileType(ValidationError):
    default_message = "File type not supported. Use DOCX, PPTX, XLSX, PDF, JPG, or PNG."


class FileTooLarge(ValidationError):
    def __init__(self, limit_bytes):
        self.limit_bytes = limit_bytes
        mb = limit_bytes // (1024 * 1024)
        super().__init__(f"File too large. Maximum size is {mb}MB.")


class MissingTargetFormat(ValidationError):
    default_message = "targetFormat is required (pdf, jpg, or docx)."


class UnsupportedConversion(ValidationError):
    def __init__(self, source, target, supported):
        self.source = source
        self.target = target
        shown = source or "(no extension)"
        super().__init__(f"Unsupported conversion: {shown} → {target}. Supported: {supported}.")


# ------ TOOL / OUTPUT FAILURES (500) ------

class ConversionFailed(ConverterError):
    status_code = 500

    def to_dict(self):
        return {"error": f"Conversion failed: {self.message}"}


class ToolNotFound(ConversionFailed):
    def __init__(self, command):
        self.command = command
        super().__init__(f"{command} is not installed or not on PATH.")


class ToolFailed(ConversionFailed):
    def __init__(self, command, returncode, stderr=""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{command} exited with status {returncode}.")


class ToolTimeout(ConversionFailed):
    def __init__(self, command, timeout):
        self.command = command
        self.timeout = timeout
        super().__init__(f"{command} did not finish within {timeout:g} seconds.")


class NoOutputProduced(ConversionFailed):
    pass
