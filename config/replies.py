"""
Canned replies and command texts for DANUU-MD Bot.

This module centralizes every text the bot sends back to a chat.
Edit these to change the bot's voice without touching dispatch logic.

Structure:
    GREETING_HELLO / GREETING_HI: Auto-reply greetings
    START_MESSAGE, HELP_MESSAGE, INFO_MESSAGE: Static command replies
    PONG_MESSAGE: Reply to !ping
    QUOTES: Quote bank used by !quote
"""

# =============================================================================
# Auto Reply
# =============================================================================
# Sent when the whole message (case-insensitive) is exactly "hello" or "hi".

GREETING_HELLO = "*Hi! I'm DANUU-MD bot.*"

GREETING_HI = "*Hello! How can I help you today?*"

# =============================================================================
# Command Replies
# =============================================================================

START_MESSAGE = """
හලෝ! මම DANUU-MD Bot.
මම මගේ නිර්මාතෘ විසින් විශේෂයෙන් නිර්මාණය කරන ලද්දේ ඔබ වෙනුවෙන් සේවය කිරීමටයි. මගේ සියලු විධාන ලැයිස්තුව බැලීමට !help ටයිප් කරන්න.
"""

PONG_MESSAGE = "Pong!"

HELP_MESSAGE = """
*DANUU-MD Bot Commands:*
* !start: Bot එක පටන් ගන්න.
* !ping: Bot එක online ද කියලා බලන්න.
* !help: මේ commands ලැයිස්තුව බලන්න.
* !info: Bot එක ගැන විස්තර දැනගන්න.
* !sticker: Image එකකට reply කරලා sticker එකක් හදන්න.
* !quote: Random quote එකක් ගන්න.
"""

INFO_MESSAGE = (
    "Hello, I'm the DANUU-MD bot. I was created with the Baileys library "
    "to automate tasks on WhatsApp."
)

# Only sent when STICKER_USAGE_HINT is enabled; otherwise !sticker without
# an image is ignored.
STICKER_USAGE_MESSAGE = "Send an image with the caption !sticker to turn it into a sticker."

# =============================================================================
# Quote Bank
# =============================================================================
# Fixed, ordered. !quote picks one entry uniformly at random.

QUOTES = (
    "The only way to do great work is to love what you do. - Steve Jobs",
    "Success is not final, failure is not fatal: it is the courage to continue that counts. - Winston Churchill",
    "The best way to predict the future is to create it. - Peter Drucker",
    "Do not wait for a perfect time. Take the moment and make it perfect. - Sri Chinmoy",
)
