"""
Message splitting utility for WhatsApp's 4096-character text limit
"""
from typing import List

WHATSAPP_MAX_LENGTH = 4096

def split_message(message: str, max_length: int = WHATSAPP_MAX_LENGTH) -> List[str]:
    """
    Split a long message into chunks that fit the WhatsApp text limit.
    
    Tries to split at natural boundaries (paragraphs, lines, sentences) to keep replies readable.
    
    Args:
        message: The message to split
        max_length: Maximum length per chunk
        
    Returns:
        List of message chunks, each at most max_length characters
    """
    if len(message) <= max_length:
        return [message]
    
    chunks = []
    remaining = message
    
    while len(remaining) > max_length:
        split_point = max_length
        chunk_text = remaining[:max_length]
        
        # Paragraph break, then line break, then sentence end, then last space
        paragraph_break = chunk_text.rfind('\n\n')
        newline = chunk_text.rfind('\n')
        sentence_end = max(
            chunk_text.rfind('. '),
            chunk_text.rfind('! '),
            chunk_text.rfind('? ')
        )
        space = chunk_text.rfind(' ')
        
        if paragraph_break > max_length * 0.5:
            split_point = paragraph_break + 2
        elif newline > max_length * 0.5:
            split_point = newline + 1
        elif sentence_end > max_length * 0.5:
            split_point = sentence_end + 2
        elif space > max_length * 0.7:
            split_point = space + 1
        
        chunk = remaining[:split_point].strip()
        if chunk:
            chunks.append(chunk)
        remaining = remaining[split_point:].strip()
    
    if remaining:
        chunks.append(remaining)
    
    return chunks


def needs_splitting(message: str, max_length: int = WHATSAPP_MAX_LENGTH) -> bool:
    """Check if a message needs to be split"""
    return len(message) > max_length
