"""estateloc — location resolution for the property portal's address forms."""
