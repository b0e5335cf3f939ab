import os, tempfile, numpy
from pyglycoensemble.errors import EmptySelectionError

## Records kept by the parser.  Everything else (CRYST1, REMARK, TER, MODEL,
## ENDMDL, END, CONECT ...) is metadata and is dropped.
ATOM_RECORDS = ('ATOM  ', 'HETATM')

## Serials past the 5-column field are written as '*****', as VMD does.
MAX_SERIAL = 99999

def FormatAtom(x,y,z,aname='D',rname='DUM',rnum=1,anum=1,elem='',atype='ATOM  ',altloc=' ',chain=' ',icode=' ',occupancy=1.00,temp=0):
    """Handles formatting of ATOM/HETATM records for PDB output"""
    values=(atype,anum,aname,altloc,rname,chain,rnum,icode,x,y,z,occupancy,temp,elem)
    if aname[0].isdigit() or len(aname) == 4:
        return '%-6s%5d %-4s%1s%-3s %1s%4d%1s   %8.3f%8.3f%8.3f %5.2f %5.2f          %2s' % values
    else:
        return '%-6s%5d  %-3s%1s%-3s %1s%4d%1s   %8.3f%8.3f%8.3f %5.2f %5.2f          %2s' % values

def split_models(pdb_string):
    """Split a multi-model PDB string into one string of atom records per model.

    Models may be delimited by MODEL/ENDMDL pairs or by bare END records.  A
    file without either delimiter is a single model.  Blocks without any atom
    records are ignored.
    """
    models, current = [], []
    for line in pdb_string.splitlines():
        line = line.rstrip('\r')
        record = line[:6].strip()
        if line[:6] in ATOM_RECORDS:
            current.append(line)
        elif record in ('MODEL', 'ENDMDL', 'END'):
            if current: models.append('\n'.join(current) + '\n')
            current = []
    if current: models.append('\n'.join(current) + '\n')
    return models

def ReadModels(pdb_path):
    """Read every model of a multi-model PDB file as a list of PDB objects"""
    with open(pdb_path) as f:
        return [PDB(x) for x in split_models(f.read())]

def WriteModel(f, num, model):
    """Write one PDB object to an open file as a MODEL/ENDMDL block"""
    f.write('MODEL     %4d\n' % num)
    f.write(str(model))
    f.write('ENDMDL\n')

def WriteModels(pdb_path, models, model_numbers=None):
    """Write PDB objects as one multi-model file with MODEL/ENDMDL records.

    The file is written to a temporary path in the same directory and renamed
    into place, so a failure never leaves a truncated file behind.

    Usage:
    WriteModels('output.pdb', frames)
    WriteModels('output.pdb', frames, model_numbers=[1, 2, 4])
    """
    if model_numbers is None:
        model_numbers = range(1, len(models) + 1)
    outdir = os.path.dirname(os.path.abspath(pdb_path))
    fd, tmp = tempfile.mkstemp(suffix='.pdb', prefix='.tmp_', dir=outdir)
    try:
        with os.fdopen(fd, 'w') as f:
            for num, model in zip(model_numbers, models):
                WriteModel(f, num, model)
            f.write('END\n')
        os.replace(tmp, pdb_path)
    except BaseException:
        os.remove(tmp)
        raise

def Concatenate(list_of_PDBs):
    """Join PDB objects, in order, into one continuous atom stream"""
    p = PDB()
    p.listdict = [d.copy() for P in list_of_PDBs for d in P.listdict]
    p._update()
    return p

class PDB:
    """A PDB object stores the atom records of one structure and their parsed fields.

    Arguments: (str)pdbpath OR (str)pdbstring

    Usage:
    P = PDB('pm.pdb.B99990001.pdb')
    Q = PDB(open('pm.pdb.B99990001.pdb').read())

    Note:
    Each atom is a dict in P.listdict holding the parsed fields and the record
    itself under 'line'.  Edits (renumbering, coordinates) rewrite both.
    """
    def __init__(self, arg=None):
        self.path = None
        self.listdict = []
        if arg is None: pass  ## Cloning and concatenation start from an empty PDB
        elif isinstance(arg, os.PathLike) or (isinstance(arg, str) and os.path.isfile(arg)):
            self.path = os.fspath(arg)
            with open(self.path) as f:
                self.Parse(f.read())
        else:
            if len(arg) < 200 and arg.endswith('.pdb'):
                raise FileNotFoundError('Could not find the pdb: ' + arg)
            self.Parse(arg)
        self._update()

    def __repr__(self):
        if not self.num_atoms:
            return '<PDB object at %s. No atoms>' % hex(id(self))
        return '<PDB object at %s. %d atoms, chains %s>' % (hex(id(self)), self.num_atoms, ''.join(self.chains))

    def __str__(self): return ''.join(d['line'] + '\n' for d in self.listdict)
    def __len__(self): return self.num_atoms

    def __getitem__(self, selection):
        """Returns a PDB object with just the selected atoms; the selection must match something.

        Usage:
        A = P[Chain('A') & Standard()]
        CAtrace = P[AtomName('CA')]
        """
        sub = self.Select(selection)
        if not sub.num_atoms:
            raise EmptySelectionError(selection)
        return sub

    def _update(self):
        self.num_atoms = len(self.listdict)
        self.chains = list(dict.fromkeys(d['chain'] for d in self.listdict))
        self.resIDs = list(dict.fromkeys((d['chain'], d['resi'], d['icode']) for d in self.listdict))
        self.resids = sorted(set(d['resi'] for d in self.listdict))

    def Select(self, selection):
        """Returns a PDB object with the atoms matching a selection predicate, in file order.

        Arguments: (Predicate)selection
        Returns: PDB, possibly without atoms

        Usage:
        glycan = P.Select(~Standard() & ResidueRange(3394, 3549))
        """
        p = PDB()
        p.listdict = [d.copy() for d in self.listdict if selection(d)]
        p._update()
        return p

    def Renumber(self, start=1):
        """Renumber residues sequentially from start, in the order they appear.

        A new residue begins whenever the chain, residue number or insertion
        code changes.  Insertion codes are cleared; chains and atom names are
        left alone.

        Arguments: (int)start
        Returns: None

        Usage:
        P = PDB('1pgb.pdb')
        P.Renumber(10)
        """
        lastkey, new_resi = None, start - 1
        for d in self.listdict:
            key = (d['chain'], d['resi'], d['icode'])
            if key != lastkey:
                new_resi += 1
                lastkey = key
            d['resi'], d['icode'] = new_resi, ' '
            d['line'] = d['line'][:22] + '%4d ' % new_resi + d['line'][27:]
        self._update()

    def Reatom(self, start=1):
        """Renumber atom serials sequentially from start"""
        for num, d in enumerate(self.listdict, start):
            d['num'] = num
            serial = '%5d' % num if num <= MAX_SERIAL else '*****'
            d['line'] = d['line'][:6] + serial + d['line'][11:]

    def SetCoords(self, xyz):
        """Replace every coordinate, rewriting the records.

        Arguments: N x 3 array in atom order
        """
        xyz = numpy.asarray(xyz, dtype=float)
        assert xyz.shape == (self.num_atoms, 3), 'Expected %d coordinates, got %s' % (self.num_atoms, xyz.shape)
        for d, (X, Y, Z) in zip(self.listdict, xyz):
            d['line'] = d['line'][:30] + '%8.3f%8.3f%8.3f' % (X, Y, Z) + d['line'][54:]
            d['x'], d['y'], d['z'] = X, Y, Z

    def Transform(self, R, T):
        """Apply a rigid-body transform as returned by superpose_rot_trans"""
        if not self.num_atoms: return
        self.SetCoords(numpy.dot(self.GetCoords(), numpy.asarray(R)) + numpy.asarray(T))

    def Clone(self):
        """Create a new PDB object that matches the current object."""
        p = PDB()
        p.path = self.path
        p.listdict = [x.copy() for x in self.listdict]
        p._update()
        return p

    def WritePDB(self, pdbfilename, append=False):
        """Output the atom records to the specified path.

        Arguments: (str)pdbfilename
        Returns: None

        Usage:
        P.WritePDB('output.pdb')
        P.WritePDB('output.pdb',append=True)
        """
        with open(pdbfilename, 'a' if append else 'w') as f:
            f.write(str(self))

    def GetCoords(self):
        """Return the coordinates as an array.

        Arguments: None
        Returns: numpy array

        Usage:
        coords = P.GetCoords()
        """
        return numpy.array([(d['x'], d['y'], d['z']) for d in self.listdict]).reshape(-1, 3)

    def Parse(self, pdbstring):
        """Parse a pdb string line by line, keeping only ATOM and HETATM records"""
        listdict = []
        for line in pdbstring.splitlines():
            line = line.rstrip('\r')
            if line[:6] not in ATOM_RECORDS: continue

            ## Parse each ATOM/HETATM line
            try: num = int(line[6:11])
            except ValueError: num = None
            name = line[12:16].strip()
            altloc = line[16]
            resn = line[17:21].strip()
            chain = line[21]
            resi = int(line[22:26])
            icode = line[26:27] or ' '
            x = float(line[30:38])
            y = float(line[38:46])
            z = float(line[46:54])

            ## Items past the coordinates optional
            try: occup = float(line[54:60])
            except ValueError: occup = None
            try: bfact = float(line[60:66])
            except ValueError: bfact = None
            elem = line[76:78].strip()

            listdict.append(dict(
                num=num, name=name, altloc=altloc, resn=resn, chain=chain,
                resi=resi, icode=icode, x=x, y=y, z=z, occup=occup,
                bfact=bfact, elem=elem, het=line[:6] == 'HETATM', line=line,
            ))
        self.listdict = listdict
