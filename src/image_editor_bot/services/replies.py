"""User-facing texts and keyboards."""

UPLOAD_BUTTON = "📤 Upload image"
CANCEL_BUTTON = "❌ Cancel operation"

MAIN_REPLY_KEYBOARD: dict[str, object] = {
    "keyboard": [[{"text": UPLOAD_BUTTON}], [{"text": CANCEL_BUTTON}]],
    "resize_keyboard": True,
    "one_time_keyboard": False,
}
EDITING_REPLY_KEYBOARD: dict[str, object] = {
    "keyboard": [[{"text": CANCEL_BUTTON}]],
    "resize_keyboard": True,
    "one_time_keyboard": False,
}


def inline_keyboard(rows: list[list[tuple[str, str]]]) -> dict:
    """Build a Telegram inline keyboard payload."""
    return {
        "inline_keyboard": [
            [{"text": label, "callback_data": callback} for label, callback in row]
            for row in rows
        ]
    }


MAIN_INLINE_KEYBOARD = inline_keyboard([[("📝 Examples", "examples")]])
RECEIVED_INLINE_KEYBOARD = inline_keyboard([[("📝 Show examples", "examples")]])
RESULT_INLINE_KEYBOARD = inline_keyboard([[("📤 Upload a new image", "upload_new")]])
RETRY_INLINE_KEYBOARD = inline_keyboard(
    [[("🔄 Try again", "try_again"), ("❌ Cancel", "cancel_operation")]]
)
PHOTO_INLINE_KEYBOARD = inline_keyboard(
    [[("📖 How do I send a document?", "help_document")]]
)

WELCOME_TEXT = (
    "🖼️ *Welcome to Image Editor Bot!*\n\n"
    "📝 *How to use:*\n"
    "1. Send an image *as a document* (not as a photo)\n"
    "2. Describe what should change\n"
    "3. Get the edited image back\n\n"
    "Supported formats: JPG, PNG, WEBP up to 20MB."
)
HELP_TEXT = (
    "❓ *Help*\n\n"
    "• Send images only as documents\n"
    "• Formats: JPG, PNG, WEBP\n"
    "• Maximum size: 20MB\n\n"
    "/start - main menu\n"
    "/cancel - cancel the current operation"
)
HELP_DOCUMENT_TEXT = (
    "❓ *How to send a document*\n\n"
    "1️⃣ Tap the paperclip 📎\n"
    '2️⃣ Choose "File"\n'
    "3️⃣ Pick the image\n"
    "4️⃣ Send it\n\n"
    "⚠️ Do not send it as a photo, Telegram compresses photos."
)
EXAMPLES_TEXT = (
    "💡 *Example requests:*\n\n"
    '1️⃣ "Make the background white"\n'
    '2️⃣ "Remove the scratch in the top left corner"\n'
    '3️⃣ "Change the sign text to OPEN"\n\n'
    "✨ Be specific about where the change goes and what it should say."
)
UPLOAD_HINT_TEXT = "📎 Send the image as a document."
TRY_AGAIN_TEXT = "🔄 Try rephrasing the request more precisely."

UNSUPPORTED_FORMAT_TEXT = "❌ Unsupported file format. Supported: JPG, PNG, WEBP"
FILE_TOO_LARGE_TEXT = "❌ File is too large. Maximum size: 20MB"
LOADING_TEXT = "⏳ Loading the image..."
IMAGE_RECEIVED_TEXT = (
    "✅ *Image received!*\n\n"
    "💬 Now describe what should be changed.\n\n"
    '💡 For example: "Make the background white"'
)
NO_IMAGE_TEXT = "ℹ️ Send an image as a document first."
PROCESSING_TEXT = "⏳ Processing the image...\n\n🔄 This may take a while..."
BUSY_TEXT = "⏳ Your previous request is still being processed. Please wait."
DONE_CAPTION = "✅ Done! The image was edited."
NEXT_STEP_TEXT = "What's next?"
RETRY_HINT = "Try again or use /cancel to cancel."
CANCELLED_TEXT = "✅ Operation cancelled. Send a new image to edit."
NOTHING_TO_CANCEL_TEXT = "ℹ️ No active operation."
PHOTO_WARNING_TEXT = (
    "⚠️ *Attention!* Telegram compresses photos.\n\n"
    "📎 Please send the image *as a document*."
)
PRIVATE_BOT_TEXT = "This bot is private."
